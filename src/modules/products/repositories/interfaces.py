"""Product repository interface.

Look-ups used by the checkout resolver (numeric key, SKU) and the atomic
stock decrement used when an order is persisted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for catalog products."""

    @abstractmethod
    def get_by_id(self, id: Any) -> Optional[Product]:
        """Retrieve a product by its numeric key; ``None`` for non-numeric input."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU (case-insensitive)."""

    @abstractmethod
    def decrement_stock(self, product_id: int, quantity: int) -> None:
        """Remove ``quantity`` units in one conditional update.

        Raises ``StockConflict`` when the row holds fewer than ``quantity``
        units at update time.
        """
