"""Catalog product.

Business rules implemented:
- SKU is unique and normalised to uppercase.
- Inactive products cannot be sold (enforced by the checkout resolver).
- Prices are integer centavos, never negative.
- Stock is only tracked when ``stock_managed`` is set and never goes
  below zero (database check constraint + conditional decrement).
"""

from __future__ import annotations

import structlog
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import TimeStampedModel

logger = structlog.get_logger(__name__)


class Product(TimeStampedModel):
    """Sellable catalog item.

    Keeps Django's integer primary key: carts reference products either by
    this numeric id or by ``sku``.  Package dimensions feed the shipping
    quote.
    """

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price_cents = models.PositiveIntegerField()
    weight_grams = models.PositiveIntegerField(default=300)
    width_cm = models.PositiveIntegerField(default=11)
    height_cm = models.PositiveIntegerField(default=2)
    length_cm = models.PositiveIntegerField(default=16)
    active = models.BooleanField(default=True)
    stock_managed = models.BooleanField(default=True)
    stock_quantity = models.IntegerField(default=0)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["active"], name="products_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError(
                {"stock_quantity": "Stock quantity cannot be negative."}
            )

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        if self.sku:
            self.sku = self.sku.strip().upper()
        super().save(*args, **kwargs)
        if is_new:
            logger.info("product_created", product_id=self.pk, sku=self.sku)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
