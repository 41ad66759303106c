"""Django ORM implementation of the Order repository.

Writes do not open their own transaction: they join the one opened by
``CheckoutService.create_order`` so order, items, stock and payment
preference commit or roll back together.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.repositories.interfaces import IProductRepository

if TYPE_CHECKING:
    from modules.checkout.dtos import ShippingSelectionDTO
    from modules.checkout.pricing import OrderTotals
    from modules.checkout.resolver import ResolvedItem
    from modules.coupons.models import Coupon
    from modules.customers.models import Address, Customer

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def __init__(self, product_repository: Optional[IProductRepository] = None) -> None:
        self._product_repo = product_repository or ProductDjangoRepository()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_order(
        self,
        totals: OrderTotals,
        shipping: ShippingSelectionDTO,
        address: Address,
        customer: Customer,
        coupon: Optional[Coupon] = None,
    ) -> Order:
        order = Order(
            customer=customer,
            address=address,
            subtotal_cents=totals.subtotal_cents,
            shipping_cents=totals.shipping_cents,
            discount_cents=totals.discount_cents,
            total_cents=totals.total_cents,
            coupon=coupon,
            coupon_code=coupon.code if coupon else "",
            shipping_carrier=shipping.carrier,
            shipping_service=shipping.service_name,
            shipping_estimate_days=shipping.delivery_time_days,
        )
        order.save()
        logger.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_cents=order.total_cents,
        )
        return order

    def record_items(self, order: Order, items: Sequence[ResolvedItem]) -> None:
        for item in items:
            product = item.product
            OrderItem.objects.create(
                order=order,
                product=product,
                title=product.name,
                sku=product.sku,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                weight_grams=product.weight_grams,
            )
            if product.stock_managed:
                self._product_repo.decrement_stock(product.pk, item.quantity)

        logger.info("order.items_recorded", order_id=str(order.id), item_count=len(items))

    def attach_payment_preference(self, order: Order, preference_id: str) -> Order:
        order.payment_preference_id = preference_id
        order.save(update_fields=["payment_preference_id"])
        logger.info(
            "order.payment_preference_attached",
            order_id=str(order.id),
            preference_id=preference_id,
        )
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        try:
            return Order.objects.prefetch_related("items").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_customer(self, order_id: Any, customer: Customer) -> Optional[Order]:
        try:
            return (
                Order.objects.select_related("address")
                .prefetch_related("items")
                .filter(id=order_id, customer=customer)
                .first()
            )
        except (ValueError, ValidationError):
            return None
