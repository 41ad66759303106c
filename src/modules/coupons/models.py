"""Discount coupon.

Business rules implemented:
- Codes are unique and case-insensitive (stored uppercase).
- ``percent`` coupons take ``value`` in percentage points (1-100);
  ``fixed`` coupons take ``value`` in centavos.
- A coupon is redeemable only while ``active`` and inside its optional
  ``starts_at`` / ``ends_at`` window.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import TimeStampedModel


class DiscountType(models.TextChoices):
    PERCENT = "percent", "Percentual"
    FIXED = "fixed", "Valor fixo"


class Coupon(TimeStampedModel):
    code = models.CharField(max_length=40, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    discount_type = models.CharField(
        max_length=10,
        choices=DiscountType.choices,
        default=DiscountType.PERCENT,
    )
    value = models.PositiveIntegerField()
    min_subtotal_cents = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)
    starts_at = models.DateTimeField(null=True, blank=True)
    ends_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "coupons"
        ordering = ["code"]

    def clean(self) -> None:
        super().clean()
        if self.discount_type == DiscountType.PERCENT and not 0 < self.value <= 100:
            raise ValidationError({"value": "Percent coupons must be between 1 and 100."})
        if self.starts_at and self.ends_at and self.starts_at > self.ends_at:
            raise ValidationError({"ends_at": "End of validity precedes its start."})

    def save(self, *args, **kwargs) -> None:
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def is_within_window(self, moment) -> bool:
        if self.starts_at and moment < self.starts_at:
            return False
        if self.ends_at and moment > self.ends_at:
            return False
        return True

    def __str__(self) -> str:
        return f"{self.code} ({self.discount_type}: {self.value})"
