"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
or ``False`` instead of raising HTTP-level exceptions; the Service
Layer decides how to translate a missing entity into an API response.

Read methods return lazy QuerySets so the API layer can paginate,
filter and order them without loading the whole table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import structlog

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, QuerySet

from modules.products.constants import STOCK_MAX
from modules.products.models import Product, ProductStatus
from modules.products.normalization import normalize_sku, normalize_text
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a product by primary key.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return Product.objects.filter(id=id).first()
        except (ValueError, TypeError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        """Generic look-up helper: products matching Django ORM look-ups.

        Examples of valid filters::

            {"status": "active"}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def get_all(self) -> QuerySet[Product]:
        return Product.objects.all()

    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (case-insensitive via upper normalisation)."""
        return Product.objects.filter(sku=normalize_sku(sku)).first()

    def get_by_category(self, category: str) -> QuerySet[Product]:
        return Product.objects.filter(category__iexact=normalize_text(category))

    def get_active(self) -> QuerySet[Product]:
        return Product.objects.filter(status=ProductStatus.ACTIVE)

    def exists_by_sku(self, sku: str, exclude_id: Optional[int] = None) -> bool:
        queryset = Product.objects.filter(sku=normalize_sku(sku))
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    @transaction.atomic
    def create(self, entity: Product) -> Product:
        """Insert a new product; the database assigns ``id``/``created_at``."""
        entity.save(force_insert=True)
        logger.info("product.inserted", product_id=entity.id, sku=entity.sku)
        return entity

    @transaction.atomic
    def update(self, entity: Product) -> Product:
        """Persist all fields of an existing product."""
        entity.save(force_update=True)
        logger.info("product.saved", product_id=entity.id, sku=entity.sku)
        return entity

    @transaction.atomic
    def delete(self, id: int) -> bool:
        """Hard-delete a product by ID.

        Returns ``True`` if a row was removed, ``False`` if no product
        exists with the given ID.
        """
        try:
            deleted, _ = Product.objects.filter(id=id).delete()
        except (ValueError, TypeError, ValidationError):
            return False
        if deleted:
            logger.info("product.hard_deleted", product_id=id)
        return deleted > 0

    def adjust_stock(self, id: int, delta: int, updated_at: datetime) -> bool:
        """Conditional ``UPDATE ... SET stock = stock + delta``.

        A single statement, so two concurrent reductions can never both
        pass the ``stock >= -delta`` guard against the same units.  An
        increase is refused when the result would exceed ``STOCK_MAX``.
        """
        queryset = Product.objects.filter(id=id)
        if delta < 0:
            queryset = queryset.filter(stock__gte=-delta)
        else:
            queryset = queryset.filter(stock__lte=STOCK_MAX - delta)
        updated = queryset.update(stock=F("stock") + delta, updated_at=updated_at)
        if updated:
            logger.info("product.stock_adjusted", product_id=id, delta=delta)
        return updated > 0
