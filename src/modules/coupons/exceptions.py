"""Coupon domain exceptions."""

from __future__ import annotations


class CouponInvalid(Exception):
    """The coupon does not exist, is inactive, expired or not applicable."""
