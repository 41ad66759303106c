"""Coupon evaluation (Use Cases).

Business rules enforced:
- Unknown, inactive or out-of-window coupons are rejected.
- The minimum subtotal must be met.
- The discount is always clamped to ``[0, subtotal]``, so a coupon can
  never make the merchandise total negative.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

import structlog
from django.utils import timezone

from modules.coupons.exceptions import CouponInvalid
from modules.coupons.models import DiscountType

if TYPE_CHECKING:
    from modules.coupons.models import Coupon
    from modules.coupons.repositories.interfaces import ICouponRepository

logger = structlog.get_logger(__name__)


class CouponService:
    """Application service that validates coupons and prices discounts."""

    def __init__(self, repository: ICouponRepository) -> None:
        self._repo = repository

    def find_active_coupon(self, code: str) -> Coupon:
        """Return the redeemable coupon for ``code``.

        Raises:
            CouponInvalid: missing, inactive or outside its validity window.
        """
        log = logger.bind(coupon_code=(code or "").strip().upper())
        coupon = self._repo.get_by_code(code)
        if coupon is None:
            log.info("coupon.not_found")
            raise CouponInvalid("Coupon not found.")
        if not coupon.active:
            log.info("coupon.inactive")
            raise CouponInvalid("Coupon is inactive.")
        if not coupon.is_within_window(timezone.now()):
            log.info("coupon.out_of_window")
            raise CouponInvalid("Coupon is outside its validity window.")
        return coupon

    def compute_discount(self, coupon: Coupon, subtotal_cents: int) -> int:
        """Discount in centavos for ``subtotal_cents``, clamped to the subtotal.

        Raises:
            CouponInvalid: the subtotal is below the coupon minimum.
        """
        if subtotal_cents < coupon.min_subtotal_cents:
            raise CouponInvalid(
                f"Coupon {coupon.code} requires a minimum subtotal of "
                f"R$ {coupon.min_subtotal_cents / 100:.2f}."
            )

        if coupon.discount_type == DiscountType.PERCENT:
            raw = (Decimal(subtotal_cents) * coupon.value / 100).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
            discount = int(raw)
        else:
            discount = coupon.value

        discount = max(0, min(discount, subtotal_cents))
        logger.info(
            "coupon.discount_computed",
            coupon_code=coupon.code,
            subtotal_cents=subtotal_cents,
            discount_cents=discount,
        )
        return discount
