"""Order repository interface.

The three write operations run inside the caller's transaction: the
checkout service opens one ``transaction.atomic()`` block around
creation, item recording (with stock decrements) and the payment
preference attachment, so a failure at any stage leaves nothing behind.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.checkout.dtos import ShippingSelectionDTO
    from modules.checkout.pricing import OrderTotals
    from modules.checkout.resolver import ResolvedItem
    from modules.coupons.models import Coupon
    from modules.customers.models import Address, Customer
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def create_order(
        self,
        totals: OrderTotals,
        shipping: ShippingSelectionDTO,
        address: Address,
        customer: Customer,
        coupon: Optional[Coupon] = None,
    ) -> Order:
        """Insert the order header."""

    @abstractmethod
    def record_items(self, order: Order, items: Sequence[ResolvedItem]) -> None:
        """Snapshot each resolved item and decrement tracked stock.

        Raises ``StockConflict`` when a conditional decrement fails.
        """

    @abstractmethod
    def attach_payment_preference(self, order: Order, preference_id: str) -> Order:
        """Store the payment provider's preference id on the order."""

    @abstractmethod
    def get_for_customer(self, order_id: Any, customer: Customer) -> Optional[Order]:
        """Retrieve an order with its items, only when ``customer`` owns it."""
