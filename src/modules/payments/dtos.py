"""Payment DTOs exchanged with the payment provider.

``PaymentLineItem.unit_price`` is in major currency units (reais) with two
decimal places; it is the only place in the system where money leaves
integer centavos.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PaymentLineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    quantity: int = Field(ge=1)
    unit_price: Decimal
    currency_id: str = "BRL"

    def as_payload(self) -> dict:
        return {
            "title": self.title,
            "quantity": self.quantity,
            "currency_id": self.currency_id,
            "unit_price": float(self.unit_price),
        }


class Payer(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    name: str = ""
    cpf: str = ""

    def as_payload(self) -> dict:
        payload: dict = {"email": self.email, "name": self.name}
        if self.cpf:
            payload["identification"] = {"type": "CPF", "number": self.cpf}
        return payload


class PaymentPreference(BaseModel):
    model_config = ConfigDict(frozen=True)

    preference_id: str
    redirect_url: str
