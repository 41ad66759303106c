"""Coupon repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.coupons.models import Coupon


class ICouponRepository(IRepository["Coupon"]):
    @abstractmethod
    def get_by_code(self, code: str) -> Optional[Coupon]:
        """Retrieve a coupon by code (case-insensitive)."""
