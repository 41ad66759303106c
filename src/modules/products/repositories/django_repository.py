"""Django ORM implementation of the Product repository.

Look-ups follow the Null Object pattern: they return ``None`` instead of
raising, and the checkout resolver decides how a missing product is
reported.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from django.db.models import F
from django.utils import timezone

from modules.products.exceptions import StockConflict
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Product]:
        try:
            pk = int(id)
        except (TypeError, ValueError):
            return None
        if isinstance(id, float) and not id.is_integer():
            return None
        return Product.objects.filter(pk=pk).first()

    def get_by_sku(self, sku: str) -> Optional[Product]:
        normalized = str(sku).strip().upper()
        if not normalized:
            return None
        return Product.objects.filter(sku=normalized).first()

    def decrement_stock(self, product_id: int, quantity: int) -> None:
        updated = Product.objects.filter(
            pk=product_id, stock_quantity__gte=quantity
        ).update(
            stock_quantity=F("stock_quantity") - quantity,
            updated_at=timezone.now(),
        )
        if not updated:
            logger.warning(
                "product.stock_conflict", product_id=product_id, quantity=quantity
            )
            raise StockConflict(product_id, quantity)
        logger.info("product.stock_decremented", product_id=product_id, quantity=quantity)
