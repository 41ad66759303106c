"""Order read-side service.

Orders are created by ``modules.checkout``; this service only exposes a
buyer's own orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from modules.customers.exceptions import CustomerNotFound
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order queries.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        customer_repository: ICustomerRepository,
    ) -> None:
        self._order_repo = order_repository
        self._customer_repo = customer_repository

    def get_order_for_user(self, order_id: str, user: Any) -> Order:
        """Retrieve one of the caller's orders.

        Raises:
            CustomerNotFound: the user has no customer profile.
            OrderNotFound: missing order or owned by someone else.
        """
        customer = self._customer_repo.get_by_user(user)
        if customer is None:
            raise CustomerNotFound("Customer profile not found.")
        order = self._order_repo.get_for_customer(order_id, customer)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        logger.info("order.retrieved", order_id=str(order.id))
        return order
