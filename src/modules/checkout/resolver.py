"""Cart line resolution.

Turns raw cart lines into ``ResolvedItem`` values: catalog product,
positive quantity and the unit price that will be charged.  The product
is looked up by ``product_id`` (numeric key), then ``id`` (numeric key,
falling back to SKU), then ``sku``.  Lines without a usable quantity are
skipped; a cart where every line is skipped is invalid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

import structlog

from modules.checkout.dtos import CartLineDTO, is_blank
from modules.checkout.exceptions import InsufficientStock, InvalidInput, ProductNotFound

if TYPE_CHECKING:
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ResolvedItem:
    product: Product
    quantity: int
    unit_price_cents: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError("quantity must be at least 1")
        if self.unit_price_cents < 0:
            raise ValueError("unit_price_cents must not be negative")

    @property
    def subtotal_cents(self) -> int:
        return self.unit_price_cents * self.quantity


class ItemResolver:
    """Resolves cart lines against the product catalog."""

    def __init__(self, product_repository: IProductRepository) -> None:
        self._product_repo = product_repository

    def resolve(
        self, lines: Sequence[CartLineDTO], allow_price_override: bool = False
    ) -> List[ResolvedItem]:
        """Resolve ``lines`` in order.

        Args:
            lines: Parsed cart lines.
            allow_price_override: Honour a line's ``price_cents`` instead of
                the catalog price.

        Raises:
            InvalidInput: empty cart, or no line has a positive quantity.
            ProductNotFound: a referenced product is missing or inactive.
            InsufficientStock: a stock-managed product has too few units.
        """
        if not lines:
            raise InvalidInput("Invalid items.")

        resolved = []
        for line in lines:
            quantity = line.requested_quantity
            if quantity is None:
                logger.debug("checkout.line_skipped", reference=line.reference)
                continue

            product = self._find_product(line)
            if product is None or not product.active:
                raise ProductNotFound(line.reference)
            if product.stock_managed and product.stock_quantity < quantity:
                raise InsufficientStock(product, quantity)

            if allow_price_override and line.price_cents is not None:
                unit_price_cents = line.price_cents
            else:
                unit_price_cents = product.price_cents

            resolved.append(
                ResolvedItem(
                    product=product,
                    quantity=quantity,
                    unit_price_cents=unit_price_cents,
                )
            )

        if not resolved:
            raise InvalidInput("Invalid items.")
        return resolved

    def _find_product(self, line: CartLineDTO) -> Optional[Product]:
        if not is_blank(line.product_id):
            return self._product_repo.get_by_id(line.product_id)
        if not is_blank(line.id):
            return self._product_repo.get_by_id(line.id) or self._product_repo.get_by_sku(
                str(line.id)
            )
        if not is_blank(line.sku):
            return self._product_repo.get_by_sku(line.sku)
        return None
