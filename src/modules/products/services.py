"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- RN-PRO-001: SKU must be unique (self excluded on update).
- RN-PRO-002: Soft delete marks the product inactive.
- RN-PRO-003: Price must be greater than zero.
- RN-PRO-004: Stock cannot be negative, before or after any adjustment.
- RN-PRO-005: Hard delete removes the product permanently.

Commands that target a product by id return an ``Outcome``: falsy with
a ``ProductNotFound`` when the product is missing.  Rule violations
raise the exceptions in ``modules.products.exceptions``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.products.constants import STOCK_MAX
from modules.products.dtos import StockAvailability
from modules.products.exceptions import (
    DuplicateSku,
    InsufficientStock,
    InvalidArgument,
    ProductNotFound,
)
from modules.products.models import Product
from modules.products.normalization import (
    normalize_optional_text,
    normalize_sku,
    normalize_text,
)
from shared.domain.results import Outcome

if TYPE_CHECKING:
    from modules.products.dtos import ProductInputDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    Holds no state between calls.
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[Product]:
        """Generic look-up helper for internal callers (e.g. ``{"price__lte": 10}``).

        The HTTP list endpoint uses the named queries below instead.
        """
        return self._repo.list(filters)

    def list_all_products(self) -> Iterable[Product]:
        logger.info("product.list_all")
        return self._repo.get_all()

    def list_products_by_category(self, category: str) -> Iterable[Product]:
        logger.info("product.list_by_category", category=category)
        return self._repo.get_by_category(category)

    def list_active_products(self) -> Iterable[Product]:
        logger.info("product.list_active")
        return self._repo.get_active()

    def get_product(self, id: int) -> Optional[Product]:
        """Retrieve a single product by ID, or ``None``."""
        return self._repo.get_by_id(id)

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a single product by SKU, or ``None``."""
        return self._repo.get_by_sku(sku)

    def product_exists(self, id: int) -> bool:
        return self._repo.get_by_id(id) is not None

    def is_stock_available(self, product_id: int, quantity: int) -> bool:
        """``False`` when the product is missing *or* short of stock.

        Use ``check_stock`` to tell the two cases apart.
        """
        outcome = self.check_stock(product_id, quantity)
        return bool(outcome) and outcome.unwrap().is_available

    def check_stock(self, product_id: int, quantity: int) -> Outcome[StockAvailability]:
        """Compare ``quantity`` with the stock on hand.

        A missing product yields a not-found outcome; otherwise the
        outcome carries a ``StockAvailability``.
        """
        log = logger.bind(product_id=product_id, quantity=quantity)
        product = self._repo.get_by_id(product_id)
        if product is None:
            log.warning("product.stock_check_not_found")
            return Outcome.not_found(ProductNotFound(product_id))

        availability = StockAvailability(
            product_id=product.id,
            requested=quantity,
            available=product.stock,
        )
        log.info("product.stock_checked", available=product.stock)
        return Outcome.success(availability)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: ProductInputDTO) -> Product:
        """Create a new product after enforcing uniqueness and value rules.

        Raises:
            DuplicateSku: if the normalised SKU is already taken (RN-PRO-001).
            InvalidArgument: if price <= 0 or stock < 0 (RN-PRO-003/004).
        """
        sku = normalize_sku(dto.sku)
        log = logger.bind(sku=sku)

        if self._repo.exists_by_sku(sku):
            log.warning("product.duplicate_sku")
            raise DuplicateSku(sku)
        self._validate_values(dto.price, dto.stock)

        product = Product(
            name=normalize_text(dto.name),
            description=normalize_optional_text(dto.description),
            sku=sku,
            price=dto.price,
            stock=dto.stock,
            category=normalize_optional_text(dto.category),
        )
        product.is_active = dto.is_active

        try:
            product = self._repo.create(product)
        except IntegrityError as exc:
            log.warning("product.duplicate_sku", source="constraint")
            raise DuplicateSku(sku) from exc

        log.info("product.created", product_id=product.id)
        return product

    @transaction.atomic
    def update_product(self, id: int, dto: ProductInputDTO) -> Outcome[Product]:
        """Overwrite every mutable field of an existing product.

        ``id`` and ``created_at`` never change.

        Raises:
            DuplicateSku: if another product already uses the SKU.
            InvalidArgument: if price <= 0 or stock < 0.
        """
        log = logger.bind(product_id=id)

        product = self._repo.get_by_id(id)
        if product is None:
            log.warning("product.update_not_found")
            return Outcome.not_found(ProductNotFound(id))

        sku = normalize_sku(dto.sku)
        if self._repo.exists_by_sku(sku, exclude_id=id):
            log.warning("product.duplicate_sku", sku=sku)
            raise DuplicateSku(sku)
        self._validate_values(dto.price, dto.stock)

        product.name = normalize_text(dto.name)
        product.description = normalize_optional_text(dto.description)
        product.sku = sku
        product.price = dto.price
        product.stock = dto.stock
        product.category = normalize_optional_text(dto.category)
        product.is_active = dto.is_active
        product.touch()

        try:
            product = self._repo.update(product)
        except IntegrityError as exc:
            log.warning("product.duplicate_sku", sku=sku, source="constraint")
            raise DuplicateSku(sku) from exc

        log.info("product.updated")
        return Outcome.success(product)

    @transaction.atomic
    def delete_product(self, id: int) -> Outcome[Product]:
        """Soft-delete a product (RN-PRO-002); the row is kept."""
        log = logger.bind(product_id=id)

        product = self._repo.get_by_id(id)
        if product is None:
            log.warning("product.soft_delete_not_found")
            return Outcome.not_found(ProductNotFound(id))

        product.deactivate()
        product = self._repo.update(product)
        log.info("product.soft_deleted")
        return Outcome.success(product)

    @transaction.atomic
    def hard_delete_product(self, id: int) -> Outcome[int]:
        """Permanently remove a product (RN-PRO-005). Irreversible."""
        log = logger.bind(product_id=id)

        if not self._repo.delete(id):
            log.warning("product.hard_delete_not_found")
            return Outcome.not_found(ProductNotFound(id))

        log.info("product.hard_deleted")
        return Outcome.success(id)

    @transaction.atomic
    def reduce_stock(self, product_id: int, quantity: int) -> Outcome[Product]:
        """Remove ``quantity`` units from stock.

        The decrement is a conditional write, so concurrent reductions
        can never drive stock below zero (RN-PRO-004).

        Raises:
            InvalidArgument: if quantity <= 0.
            InsufficientStock: if fewer than ``quantity`` units remain.
        """
        self._validate_quantity(quantity)
        log = logger.bind(product_id=product_id, quantity=quantity)

        product = self._repo.get_by_id(product_id)
        if product is None:
            log.warning("product.stock_reduce_not_found")
            return Outcome.not_found(ProductNotFound(product_id))

        if product.stock < quantity:
            log.warning("product.insufficient_stock", available=product.stock)
            raise InsufficientStock(product_id, product.stock, quantity)

        if not self._repo.adjust_stock(product_id, -quantity, timezone.now()):
            # Lost a race: re-read to report what actually happened.
            current = self._repo.get_by_id(product_id)
            if current is None:
                log.warning("product.stock_reduce_not_found", source="race")
                return Outcome.not_found(ProductNotFound(product_id))
            log.warning(
                "product.insufficient_stock",
                available=current.stock,
                source="race",
            )
            raise InsufficientStock(product_id, current.stock, quantity)

        product = self._repo.get_by_id(product_id)
        if product is None:
            return Outcome.not_found(ProductNotFound(product_id))
        log.info("product.stock_reduced", stock=product.stock)
        return Outcome.success(product)

    @transaction.atomic
    def increase_stock(self, product_id: int, quantity: int) -> Outcome[Product]:
        """Add ``quantity`` units to stock, up to ``STOCK_MAX`` in total.

        Raises:
            InvalidArgument: if quantity <= 0 or the new stock would
                exceed ``STOCK_MAX``.
        """
        self._validate_quantity(quantity)
        log = logger.bind(product_id=product_id, quantity=quantity)

        if not self._repo.adjust_stock(product_id, quantity, timezone.now()):
            current = self._repo.get_by_id(product_id)
            if current is None:
                log.warning("product.stock_increase_not_found")
                return Outcome.not_found(ProductNotFound(product_id))
            log.warning("product.stock_limit_exceeded", stock=current.stock)
            raise InvalidArgument(
                "quantity", quantity, f"Stock cannot exceed {STOCK_MAX}"
            )

        product = self._repo.get_by_id(product_id)
        if product is None:
            return Outcome.not_found(ProductNotFound(product_id))
        log.info("product.stock_increased", stock=product.stock)
        return Outcome.success(product)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_values(price: Decimal, stock: int) -> None:
        if price is None or price <= 0:
            raise InvalidArgument("price", price, "Price must be greater than zero")
        if stock is None or stock < 0:
            raise InvalidArgument("stock", stock, "Stock cannot be negative")
        if stock > STOCK_MAX:
            raise InvalidArgument("stock", stock, f"Stock cannot exceed {STOCK_MAX}")

    @staticmethod
    def _validate_quantity(quantity: int) -> None:
        if quantity <= 0:
            raise InvalidArgument(
                "quantity", quantity, "Quantity must be greater than zero"
            )
