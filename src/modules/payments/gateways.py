"""Payment preference gateway.

``MercadoPagoPaymentGateway`` creates a Checkout Pro preference and
returns its id and hosted checkout URL.  The call is made once; transport
errors and non-2xx answers raise ``PaymentGatewayFailure`` so the caller
can roll the order back.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import httpx
import structlog

from modules.core.conf import CheckoutSettings
from modules.payments.dtos import Payer, PaymentLineItem, PaymentPreference
from modules.payments.exceptions import PaymentGatewayFailure

logger = structlog.get_logger(__name__)


class PaymentGateway(ABC):
    @abstractmethod
    def create_preference(
        self,
        items: Iterable[PaymentLineItem],
        payer: Payer,
        external_reference: str,
    ) -> PaymentPreference:
        """Register a pending payment and return its redirect handle."""


class MercadoPagoPaymentGateway(PaymentGateway):
    """HTTP client for the Mercado Pago preferences API."""

    def __init__(
        self,
        config: CheckoutSettings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._config.payment_api_url,
            timeout=self._config.http_timeout,
            transport=self._transport,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._config.payment_access_token}",
            },
        )

    def build_payload(
        self,
        items: Iterable[PaymentLineItem],
        payer: Payer,
        external_reference: str,
    ) -> dict:
        payload = {
            "items": [item.as_payload() for item in items],
            "payer": payer.as_payload(),
            "external_reference": external_reference,
            "back_urls": {
                "success": self._config.payment_success_url,
                "failure": self._config.payment_failure_url,
                "pending": self._config.payment_pending_url,
            },
            "auto_return": "approved",
        }
        if self._config.payment_notification_url:
            payload["notification_url"] = self._config.payment_notification_url
        return payload

    def create_preference(
        self,
        items: Iterable[PaymentLineItem],
        payer: Payer,
        external_reference: str,
    ) -> PaymentPreference:
        payload = self.build_payload(items, payer, external_reference)
        log = logger.bind(external_reference=external_reference, item_count=len(payload["items"]))

        try:
            with self._client() as client:
                response = client.post(
                    "/checkout/preferences",
                    json=payload,
                    headers={"X-Idempotency-Key": external_reference},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            log.error("payment.preference_rejected", status_code=exc.response.status_code)
            raise PaymentGatewayFailure(
                f"Payment provider rejected the preference ({exc.response.status_code})."
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            log.error("payment.preference_failed", error=str(exc))
            raise PaymentGatewayFailure("Payment provider is unavailable.") from exc

        preference_id = body.get("id") if isinstance(body, dict) else None
        redirect_url = body.get("init_point") if isinstance(body, dict) else None
        if not preference_id or not redirect_url:
            log.error("payment.preference_incomplete")
            raise PaymentGatewayFailure("Payment provider returned an incomplete preference.")

        log.info("payment.preference_created", preference_id=preference_id)
        return PaymentPreference(preference_id=str(preference_id), redirect_url=redirect_url)
