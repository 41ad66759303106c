"""Order DRF serializers (read only).

Money is exposed both in centavos and, for display, in reais.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for the order-time product snapshot."""

    subtotal_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "title",
            "sku",
            "quantity",
            "unit_price_cents",
            "subtotal_cents",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    items = OrderItemSerializer(many=True, read_only=True)
    total = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "address_id",
            "subtotal_cents",
            "shipping_cents",
            "discount_cents",
            "total_cents",
            "total",
            "coupon_code",
            "shipping_carrier",
            "shipping_service",
            "shipping_estimate_days",
            "payment_preference_id",
            "created_at",
            "items",
        ]
        read_only_fields = fields

    def get_total(self, obj: Order) -> str:
        return f"{obj.total_cents / 100:.2f}"
