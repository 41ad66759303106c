"""Shipping domain exceptions."""

from __future__ import annotations


class ShippingUnavailable(Exception):
    """The carrier quote service could not be reached or rejected the request."""
