"""Shipping DTOs.

- ``ShippingItem``: one resolved cart line as the carrier sees it.
- ``ShippingOption``: one priced service offered by a carrier.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ShippingItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int = Field(ge=1)
    unit_price_cents: int = Field(ge=0)
    weight_grams: int = Field(ge=0)
    width_cm: int
    height_cm: int
    length_cm: int


class ShippingOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    carrier: str
    name: str
    price_cents: int = Field(ge=0)
    delivery_time_days: int | None = None
