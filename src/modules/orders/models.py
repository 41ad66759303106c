"""Order and OrderItem models.

Business rules implemented:
- Totals are integer centavos; ``total_cents`` is
  ``max(0, subtotal + shipping - discount)`` as computed by the pricing
  module.
- Order number auto-generated as human-readable identifier.
- Customer/address FKs use PROTECT to preserve financial history.
- OrderItem is an immutable snapshot of the product (title, SKU, price,
  weight) at order time, decoupled from later catalog changes.
- ``payment_preference_id`` is attached once, after the payment provider
  accepts the preference, inside the creation transaction.
"""

from __future__ import annotations

import secrets
from typing import Any

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import ORDER_NUMBER_MAX_RETRIES, ORDER_NUMBER_PREFIX


class Order(BaseModel):
    """Order aggregate root.

    ``order_number`` (``ORD-YYYYMMDD-XXXXXX``) is shown to the buyer; the
    UUIDv7 ``id`` is used for API look-ups and as the payment provider's
    external reference.
    """

    order_number = models.CharField(max_length=20, unique=True, editable=False)
    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    address = models.ForeignKey(
        "customers.Address",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    subtotal_cents = models.PositiveIntegerField()
    shipping_cents = models.PositiveIntegerField(default=0)
    discount_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField()
    coupon = models.ForeignKey(
        "coupons.Coupon",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    coupon_code = models.CharField(max_length=40, blank=True, default="")
    shipping_carrier = models.CharField(max_length=100, blank=True, default="")
    shipping_service = models.CharField(max_length=100, blank=True, default="")
    shipping_estimate_days = models.PositiveIntegerField(null=True, blank=True)
    payment_preference_id = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYYYMMDD-XXXXXX``."""
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"{ORDER_NUMBER_PREFIX}-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _ in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} (R$ {self.total_cents / 100:.2f})"


class OrderItem(BaseModel):
    """Snapshot of a resolved cart line.

    ``product`` is kept for reporting; every value the buyer paid for is
    copied so later catalog edits never change a placed order.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    title = models.CharField(max_length=255)
    sku = models.CharField(max_length=64)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    unit_price_cents = models.PositiveIntegerField()
    weight_grams = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    @property
    def subtotal_cents(self) -> int:
        return self.quantity * self.unit_price_cents

    def __str__(self) -> str:
        return f"{self.sku} x{self.quantity}"
