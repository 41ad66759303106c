"""Order API views.

Buyers can read back their own orders; creation lives in
``modules.checkout``.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.customers.exceptions import CustomerNotFound
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.orders.exceptions import OrderNotFound
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import OrderSerializer
from modules.orders.services import OrderService


class OrderViewSet(ViewSet):
    """Read-only access to the caller's orders."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = OrderService(
            order_repository=OrderDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order_for_user(pk, request.user)
        except (CustomerNotFound, OrderNotFound):
            return Response(
                {"detail": "Order not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(OrderSerializer(order).data)
