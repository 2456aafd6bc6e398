"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.  Each exception keeps the offending
values as attributes so callers can report them precisely.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from shared.domain.exceptions import NotFound


class ProductError(Exception):
    """Base class for product business-rule failures."""

    code = "product_error"


class ProductNotFound(ProductError, NotFound):
    """The requested product does not exist."""

    code = "product_not_found"

    def __init__(self, product_id: Optional[int] = None, sku: Optional[str] = None):
        self.product_id = product_id
        self.sku = sku
        if sku is not None:
            message = f"Product with SKU '{sku}' not found."
        else:
            message = f"Product {product_id} not found."
        super().__init__(message)


class DuplicateSku(ProductError):
    """Another product already uses the same normalised SKU (RN-PRO-001)."""

    code = "duplicate_sku"

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"SKU '{sku}' already registered.")


class InvalidArgument(ProductError, ValueError):
    """A value violates a structural business rule (RN-PRO-003/004)."""

    code = "invalid_argument"

    def __init__(self, field: str, value: Union[Decimal, int, None], message: str):
        self.field = field
        self.value = value
        super().__init__(f"{message} (got {field}={value}).")


class InsufficientStock(ProductError):
    """A stock reduction exceeds the quantity on hand."""

    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"available {available}, requested {requested}."
        )
