"""Product model with SKU uniqueness and stock control.

Business rules implemented:
- RN-PRO-001: SKU must be unique in the system (after normalisation).
- RN-PRO-002: Soft delete sets ``status`` to ``inactive``; the row stays.
- RN-PRO-003: Price must be greater than zero.
- RN-PRO-004: Stock cannot be negative.
- RN-PRO-005: Hard delete removes the row permanently.

RN-PRO-001/003/004 are enforced by the service layer and backed by
database constraints, so a write that slips past the service (or races
with another one) is still rejected by storage.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import TimestampedModel
from modules.products.normalization import normalize_sku

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(TimestampedModel):
    """Product aggregate root.

    Lifecycle: ``active`` <-> ``inactive`` via soft delete / update, and
    either state -> deleted (row removed) via hard delete.

    ``sku`` is normalised to trimmed uppercase on save to prevent visual
    duplicates (e.g. "sku-01" vs "SKU-01").  ``unique=True`` on ``sku``
    creates the UNIQUE INDEX, so no additional index is needed.
    """

    name = models.CharField(max_length=100, db_index=True)
    description = models.CharField(max_length=500, blank=True, default="")
    sku = models.CharField(max_length=50, unique=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.PositiveIntegerField(default=0)
    category = models.CharField(max_length=50, blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )

    class Meta:
        db_table = "products"
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["category"], name="products_category_idx"),
            models.Index(
                fields=["status", "category"],
                name="products_status_category_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @is_active.setter
    def is_active(self, value: bool) -> None:
        self.status = ProductStatus.ACTIVE if value else ProductStatus.INACTIVE

    def deactivate(self) -> None:
        """Soft delete: mark inactive and stamp ``updated_at``."""
        self.status = ProductStatus.INACTIVE
        self.touch()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = normalize_sku(self.sku)
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = normalize_sku(self.sku)
        super().save(*args, **kwargs)
        if is_new:
            logger.info(
                "product_created",
                product_id=self.id,
                sku=self.sku,
                name=self.name,
            )

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
