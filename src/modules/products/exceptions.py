"""Catalog exceptions."""

from __future__ import annotations


class StockConflict(Exception):
    """A conditional stock decrement found fewer units than requested."""

    def __init__(self, product_id: int, quantity: int) -> None:
        self.product_id = product_id
        self.quantity = quantity
        super().__init__(f"Product {product_id}: fewer than {quantity} units left.")
