"""Product repository interface.

Extends ``IRepository[Product]`` with the look-ups required by
business rule RN-PRO-001 (unique SKU) and with one atomic conditional
stock write, which closes the check-then-act race on stock mutation.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Iterable, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_all(self) -> Iterable[Product]:
        """Return every product, active or not."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (lookup is normalised)."""

    @abstractmethod
    def get_by_category(self, category: str) -> Iterable[Product]:
        """Return products whose category matches (case-insensitive)."""

    @abstractmethod
    def get_active(self) -> Iterable[Product]:
        """Return products that have not been soft-deleted."""

    @abstractmethod
    def exists_by_sku(self, sku: str, exclude_id: Optional[int] = None) -> bool:
        """Whether a product other than ``exclude_id`` uses ``sku``."""

    @abstractmethod
    def adjust_stock(self, id: int, delta: int, updated_at: datetime) -> bool:
        """Atomically add ``delta`` to the stock of product ``id``.

        The write only applies when the resulting stock is non-negative
        and no greater than ``STOCK_MAX``.
        Returns ``True`` if the row was updated, ``False`` when the
        product is missing or the condition did not hold.
        """
