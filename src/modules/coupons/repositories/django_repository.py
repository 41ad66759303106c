"""Django ORM implementation of the Coupon repository."""

from __future__ import annotations

from typing import Any, Optional

from modules.coupons.models import Coupon
from modules.coupons.repositories.interfaces import ICouponRepository


class CouponDjangoRepository(ICouponRepository):
    def get_by_id(self, id: Any) -> Optional[Coupon]:
        try:
            return Coupon.objects.filter(pk=int(id)).first()
        except (TypeError, ValueError):
            return None

    def get_by_code(self, code: str) -> Optional[Coupon]:
        normalized = (code or "").strip().upper()
        if not normalized:
            return None
        return Coupon.objects.filter(code=normalized).first()
