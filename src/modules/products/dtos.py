"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF views) and the
Service layer.  DTOs are immutable (``frozen=True``).

Input DTOs validate *shape* only: required fields, string lengths and
the price ceiling.  The business rules (price > 0, stock >= 0, unique
SKU) belong to ``ProductService``, which re-checks them on every write.

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for a full product update (PUT).
- ``StockAdjustmentDTO``: quantity for stock reduce/increase/check.
- ``StockAvailability``: output of an existence-aware stock check.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from modules.products.constants import STOCK_MAX

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
SKU_MAX_LENGTH = 50
CATEGORY_MAX_LENGTH = 50
PRICE_MAX = Decimal("999999.99")


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class ProductInputDTO(BaseModel):
    """Fields shared by create and update requests.

    Validates:
    - ``name`` has 3-100 characters after trimming.
    - ``sku`` is non-empty and at most 50 characters after trimming.
    - ``description`` (<= 500) and ``category`` (<= 50) lengths.
    - ``price`` has at most two decimal places and does not exceed
      999,999.99.
    - ``stock`` fits the database column (``STOCK_MAX``).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    sku: str
    price: Decimal
    stock: int = Field(default=0, le=STOCK_MAX)
    description: Optional[str] = None
    category: Optional[str] = None
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        v = v.strip()
        if not NAME_MIN_LENGTH <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(
                f"Name must have between {NAME_MIN_LENGTH} and "
                f"{NAME_MAX_LENGTH} characters."
            )
        return v

    @field_validator("sku")
    @classmethod
    def sku_must_not_be_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("SKU must not be empty.")
        if len(v) > SKU_MAX_LENGTH:
            raise ValueError(f"SKU cannot exceed {SKU_MAX_LENGTH} characters.")
        return v

    @field_validator("description")
    @classmethod
    def description_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters."
            )
        return v

    @field_validator("category")
    @classmethod
    def category_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.strip()) > CATEGORY_MAX_LENGTH:
            raise ValueError(
                f"Category cannot exceed {CATEGORY_MAX_LENGTH} characters."
            )
        return v

    @field_validator("price")
    @classmethod
    def price_within_bounds(cls, v: Decimal) -> Decimal:
        if v > PRICE_MAX:
            raise ValueError(f"Price cannot exceed {PRICE_MAX}.")
        exponent = v.as_tuple().exponent
        if isinstance(exponent, int) and exponent < -2:
            raise ValueError("Price cannot have more than two decimal places.")
        return v


class CreateProductDTO(ProductInputDTO):
    """Immutable DTO for product creation requests."""


class UpdateProductDTO(ProductInputDTO):
    """Immutable DTO for full product updates.

    Every mutable field is overwritten; omitting ``is_active``
    (re)activates the product.
    """


class StockAdjustmentDTO(BaseModel):
    """Quantity supplied to the stock endpoints."""

    model_config = ConfigDict(frozen=True)

    quantity: int = Field(le=STOCK_MAX)


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


class StockAvailability(BaseModel):
    """Result of checking ``requested`` units against the stock on hand."""

    model_config = ConfigDict(frozen=True)

    product_id: int
    requested: int
    available: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_available(self) -> bool:
        return self.available >= self.requested
