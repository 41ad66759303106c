"""Checkout domain exceptions.

Raised while resolving a cart; the API layer (Views) translates them,
together with the collaborators' exceptions (``AddressNotFound``,
``CouponInvalid``, ``ShippingUnavailable``, ``PaymentGatewayFailure``),
into HTTP responses.
"""

from __future__ import annotations

from typing import Any


class InvalidInput(Exception):
    """Malformed or empty cart, or a missing required field."""


class ProductNotFound(Exception):
    """A cart line references a missing or inactive product."""

    def __init__(self, reference: Any) -> None:
        self.reference = reference
        super().__init__(f"Product not found: {reference}")


class InsufficientStock(Exception):
    """A tracked product has fewer units than the cart requests."""

    def __init__(self, product: Any, requested: int) -> None:
        self.product = product
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product.name}: requested {requested}, "
            f"available {product.stock_quantity}."
        )
