"""Checkout DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  The views
validate the envelope with DRF serializers and hand these DTOs to
``CheckoutService``.  DTOs are immutable (``frozen=True``).

- ``CartLineDTO``: one raw cart line as sent by the storefront.
- ``ShippingSelectionDTO``: the option the buyer picked from a quote.
- ``QuoteRequestDTO``: input for a shipping quote.
- ``CreateOrderDTO``: input for order creation.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from modules.checkout.exceptions import InvalidInput

POSTAL_CODE_LENGTH = 8


def normalize_postal_code(value: Any) -> str:
    """Keep digits only and truncate to the 8 digits of a CEP."""
    return re.sub(r"\D", "", str(value or ""))[:POSTAL_CODE_LENGTH]


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def is_unset(value: Any) -> bool:
    """Blank or zero; such a field yields to its alternate spelling."""
    return is_blank(value) or (isinstance(value, (int, float)) and value == 0)


# ---------------------------------------------------------------------------
# Cart lines
# ---------------------------------------------------------------------------


class CartLineDTO(BaseModel):
    """A cart line before resolution.

    The product may be referenced by ``product_id`` (numeric catalog key),
    ``id`` (numeric key or SKU) or ``sku``.  Quantity comes from ``qty`` or
    ``quantity`` and is coerced lazily by ``requested_quantity`` so that a
    bad quantity skips the line instead of failing the cart.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, coerce_numbers_to_str=True
    )

    product_id: int | str | None = Field(
        default=None, validation_alias=AliasChoices("product_id", "productId")
    )
    id: int | str | None = None
    sku: Optional[str] = None
    qty: Any = None
    quantity: Any = None
    price_cents: Optional[int] = Field(default=None, ge=0)

    @property
    def requested_quantity(self) -> Optional[int]:
        """Positive integer quantity, ``1`` when absent, ``None`` to skip."""
        raw = self.qty
        if is_unset(raw) and not is_blank(self.quantity):
            raw = self.quantity
        if is_blank(raw):
            return 1
        if isinstance(raw, bool):
            return None
        try:
            value = Decimal(str(raw).strip())
        except InvalidOperation:
            return None
        if not value.is_finite():
            return None
        quantity = int(value)
        return quantity if quantity > 0 else None

    @property
    def reference(self) -> str:
        for value in (self.sku, self.product_id, self.id):
            if not is_blank(value):
                return str(value)
        return ""


def parse_cart_lines(raw_items: Any) -> List[CartLineDTO]:
    """Build cart DTOs from request data.

    Raises:
        InvalidInput: not a non-empty list of objects, or a line is malformed.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise InvalidInput("Invalid items.")
    try:
        return [CartLineDTO.model_validate(item) for item in raw_items]
    except PydanticValidationError as exc:
        raise InvalidInput(f"Invalid items: {exc.errors()[0]['msg']}") from exc


# ---------------------------------------------------------------------------
# Shipping selection
# ---------------------------------------------------------------------------


class ShippingSelectionDTO(BaseModel):
    """Shipping option chosen by the buyer, echoed back from a quote.

    Not re-checked against the carrier when the order is created.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, coerce_numbers_to_str=True
    )

    carrier: str = ""
    name: Optional[str] = None
    service: Optional[str] = None
    price_cents: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("price_cents", "cost_cents")
    )
    delivery_time_days: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def zero_price_yields_to_cost(cls, data: Any) -> Any:
        if (
            isinstance(data, dict)
            and is_unset(data.get("price_cents"))
            and not is_blank(data.get("cost_cents"))
        ):
            data = {**data, "price_cents": data["cost_cents"]}
        return data

    @field_validator("carrier", mode="before")
    @classmethod
    def carrier_as_string(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def service_name(self) -> str:
        return self.name or self.service or ""


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class QuoteRequestDTO(BaseModel):
    """Input for a shipping quote: cart lines plus destination CEP."""

    model_config = ConfigDict(frozen=True)

    items: List[CartLineDTO]
    postal_code: str

    @field_validator("postal_code", mode="before")
    @classmethod
    def postal_code_digits(cls, v: Any) -> str:
        postal_code = normalize_postal_code(v)
        if not postal_code:
            raise ValueError("Postal code is required.")
        return postal_code


class CreateOrderDTO(BaseModel):
    """Input for order creation.

    ``items`` may still be empty here; the resolver rejects empty carts
    with ``InvalidInput`` before any external call.
    """

    model_config = ConfigDict(frozen=True)

    items: List[CartLineDTO]
    address_id: str
    shipping: ShippingSelectionDTO
    coupon_code: Optional[str] = None

    @field_validator("address_id", mode="before")
    @classmethod
    def address_id_as_string(cls, v: Any) -> str:
        if is_blank(v):
            raise ValueError("Address is required.")
        return str(v)

    @field_validator("coupon_code", mode="before")
    @classmethod
    def blank_coupon_is_none(cls, v: Any) -> Optional[str]:
        if is_blank(v):
            return None
        return str(v).strip() or None
