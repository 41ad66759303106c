"""Unit tests for the Mercado Pago payment gateway (httpx.MockTransport)."""

from __future__ import annotations

import json
from decimal import Decimal

import httpx
import pytest

from modules.core.conf import get_checkout_settings
from modules.payments.dtos import Payer, PaymentLineItem
from modules.payments.exceptions import PaymentGatewayFailure
from modules.payments.gateways import MercadoPagoPaymentGateway

pytestmark = pytest.mark.unit

ITEMS = [
    PaymentLineItem(title="Stack Duplo", quantity=2, unit_price=Decimal("8.50")),
    PaymentLineItem(title="Frete - PAC", quantity=1, unit_price=Decimal("5.00")),
]
PAYER = Payer(email="buyer@example.com", name="Ana Souza", cpf="39053344705")


def _gateway(handler):
    return MercadoPagoPaymentGateway(
        get_checkout_settings(), transport=httpx.MockTransport(handler)
    )


class TestCreatePreference:
    def test_posts_items_payer_and_back_urls(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                201,
                json={"id": "123-abc", "init_point": "https://mp.test/checkout?pref_id=123-abc"},
            )

        preference = _gateway(handler).create_preference(ITEMS, PAYER, "order-1")

        assert preference.preference_id == "123-abc"
        assert preference.redirect_url == "https://mp.test/checkout?pref_id=123-abc"

        assert seen["url"].endswith("/checkout/preferences")
        assert seen["headers"]["Authorization"] == "Bearer TEST-payment-access-token"
        assert seen["headers"]["X-Idempotency-Key"] == "order-1"
        body = seen["body"]
        assert body["items"][0] == {
            "title": "Stack Duplo",
            "quantity": 2,
            "currency_id": "BRL",
            "unit_price": 8.5,
        }
        assert body["payer"]["identification"] == {"type": "CPF", "number": "39053344705"}
        assert body["external_reference"] == "order-1"
        assert body["auto_return"] == "approved"
        assert set(body["back_urls"]) == {"success", "failure", "pending"}
        assert "notification_url" not in body

    def test_payer_without_cpf_has_no_identification(self):
        assert "identification" not in Payer(email="x@example.com").as_payload()

    def test_rejected_preference(self):
        gateway = _gateway(lambda request: httpx.Response(400, json={"message": "invalid items"}))
        with pytest.raises(PaymentGatewayFailure, match="400"):
            gateway.create_preference(ITEMS, PAYER, "order-1")

    def test_incomplete_preference(self):
        gateway = _gateway(lambda request: httpx.Response(201, json={"id": "123"}))
        with pytest.raises(PaymentGatewayFailure, match="incomplete"):
            gateway.create_preference(ITEMS, PAYER, "order-1")

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PaymentGatewayFailure):
            _gateway(handler).create_preference(ITEMS, PAYER, "order-1")
