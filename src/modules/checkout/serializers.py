"""Checkout DRF serializers for API input/output.

Input serializers only check the request envelope (required keys and
their JSON types).  Cart lines and the shipping selection are validated
by the Pydantic DTOs in ``dtos.py`` because their rules (reference
priority, lenient quantities) belong to the Service Layer.
"""

from __future__ import annotations

from rest_framework import serializers

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class DestinationSerializer(serializers.Serializer):
    postal_code = serializers.CharField(required=False, allow_blank=True)
    cep = serializers.CharField(required=False, allow_blank=True)


class QuoteSerializer(serializers.Serializer):
    """Validates a POST quote body."""

    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    destination = DestinationSerializer()


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)
    address_id = serializers.CharField()
    shipping = serializers.DictField()
    coupon_code = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None
    )


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class ShippingOptionSerializer(serializers.Serializer):
    id = serializers.CharField()
    carrier = serializers.CharField()
    name = serializers.CharField()
    price_cents = serializers.IntegerField()
    delivery_time_days = serializers.IntegerField(allow_null=True)


class CheckoutResultSerializer(serializers.Serializer):
    """Response body of a successful order creation."""

    order_id = serializers.CharField(source="order.id")
    order_number = serializers.CharField(source="order.order_number")
    payment_preference_id = serializers.CharField(source="preference.preference_id")
    payment_redirect_url = serializers.CharField(source="preference.redirect_url")
