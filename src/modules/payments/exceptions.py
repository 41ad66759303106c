"""Payment domain exceptions."""

from __future__ import annotations


class PaymentGatewayFailure(Exception):
    """The payment provider did not return a usable preference."""
