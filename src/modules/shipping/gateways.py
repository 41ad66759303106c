"""Carrier quote gateway.

``MelhorEnvioShippingGateway`` talks to the Melhor Envio
``/me/shipment/calculate`` endpoint.  Services the carrier answers with an
``error`` (e.g. dimensions out of range for that service) are dropped;
an empty list means "no option for this destination" and is not an error.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional

import httpx
import structlog

from modules.core.conf import CheckoutSettings
from modules.shipping.dtos import ShippingItem, ShippingOption
from modules.shipping.exceptions import ShippingUnavailable

logger = structlog.get_logger(__name__)


class ShippingGateway(ABC):
    @abstractmethod
    def quote(self, postal_code: str, items: Iterable[ShippingItem]) -> List[ShippingOption]:
        """Return the shipping options for ``items`` delivered to ``postal_code``."""


def _to_cents(value: Any) -> Optional[int]:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _to_days(value: Any) -> Optional[int]:
    """Whole days, or ``None`` for anything that is not a non-negative integer."""
    if value is None or isinstance(value, bool):
        return None
    try:
        days = int(str(value).strip())
    except ValueError:
        return None
    return days if days >= 0 else None


class MelhorEnvioShippingGateway(ShippingGateway):
    """HTTP client for the Melhor Envio quote API."""

    def __init__(
        self,
        config: CheckoutSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._config.shipping_api_url,
            timeout=self._config.http_timeout,
            transport=self._transport,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._config.shipping_api_token}",
                "User-Agent": self._config.shipping_user_agent,
            },
        )

    def build_payload(self, postal_code: str, items: Iterable[ShippingItem]) -> dict:
        return {
            "from": {"postal_code": self._config.shipping_origin_postal_code},
            "to": {"postal_code": postal_code},
            "products": [
                {
                    "id": str(item.product_id),
                    "width": item.width_cm,
                    "height": item.height_cm,
                    "length": item.length_cm,
                    "weight": item.weight_grams / 1000,
                    "insurance_value": item.unit_price_cents / 100,
                    "quantity": item.quantity,
                }
                for item in items
            ],
            "options": {"receipt": False, "own_hand": False},
        }

    def quote(self, postal_code: str, items: Iterable[ShippingItem]) -> List[ShippingOption]:
        payload = self.build_payload(postal_code, items)
        log = logger.bind(postal_code=postal_code, product_count=len(payload["products"]))

        try:
            with self._client() as client:
                response = client.post("/me/shipment/calculate", json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            log.warning("shipping.quote_rejected", status_code=exc.response.status_code)
            raise ShippingUnavailable(
                f"Carrier rejected the quote request ({exc.response.status_code})."
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            log.warning("shipping.quote_failed", error=str(exc))
            raise ShippingUnavailable("Carrier quote service is unavailable.") from exc

        options = self.parse_options(body)
        log.info("shipping.quoted", option_count=len(options))
        return options

    @staticmethod
    def parse_options(body: Any) -> List[ShippingOption]:
        if isinstance(body, dict):
            body = [body]
        if not isinstance(body, list):
            return []

        options = []
        for service in body:
            if not isinstance(service, dict) or service.get("error"):
                continue
            price_cents = _to_cents(service.get("custom_price") or service.get("price"))
            if price_cents is None or price_cents < 0:
                logger.warning("shipping.option_skipped", service_id=service.get("id"))
                continue
            company = service.get("company")
            carrier = company.get("name") if isinstance(company, dict) else None
            delivery = service.get("custom_delivery_time") or service.get("delivery_time")
            options.append(
                ShippingOption(
                    id=str(service.get("id", "")),
                    carrier=str(carrier or ""),
                    name=str(service.get("name") or ""),
                    price_cents=price_cents,
                    delivery_time_days=_to_days(delivery),
                )
            )
        return sorted(options, key=lambda option: option.price_cents)
