from __future__ import annotations

from typing import List

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from modules.core.conf import get_checkout_settings
from modules.customers.models import Address, Customer
from modules.payments.dtos import PaymentPreference
from modules.payments.exceptions import PaymentGatewayFailure
from modules.payments.gateways import MercadoPagoPaymentGateway, PaymentGateway
from modules.products.models import Product
from modules.shipping.dtos import ShippingOption
from modules.shipping.gateways import MelhorEnvioShippingGateway, ShippingGateway

User = get_user_model()

VALID_CPF = "39053344705"


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture(autouse=True)
def _reset_state():
    """Throttle counters live in the cache; settings are built once per process."""
    cache.clear()
    get_checkout_settings.cache_clear()
    yield
    cache.clear()
    get_checkout_settings.cache_clear()


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Buyers
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return User.objects.create_user(
        username="buyer", email="buyer@example.com", password="testpass123"
    )


@pytest.fixture()
def customer(user):
    return Customer.objects.create(
        user=user,
        name="Ana Souza",
        email="buyer@example.com",
        document=VALID_CPF,
    )


@pytest.fixture()
def address(customer):
    return Address.objects.create(
        customer=customer,
        postal_code="01310-100",
        street="Avenida Paulista",
        number="1000",
        district="Bela Vista",
        city="São Paulo",
        state="sp",
    )


@pytest.fixture()
def auth_client(user, customer):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def product():
    return Product.objects.create(
        sku="STACK-DUPLO",
        name="Stack Duplo",
        price_cents=1000,
        stock_managed=True,
        stock_quantity=10,
    )


@pytest.fixture()
def untracked_product():
    return Product.objects.create(
        sku="ADESIVO",
        name="Adesivo",
        price_cents=500,
        stock_managed=False,
        stock_quantity=0,
    )


@pytest.fixture()
def inactive_product():
    return Product.objects.create(
        sku="FORA-DE-LINHA",
        name="Fora de Linha",
        price_cents=2500,
        active=False,
        stock_quantity=5,
    )


# ---------------------------------------------------------------------------
# Gateway doubles
# ---------------------------------------------------------------------------


class FakeShippingGateway(ShippingGateway):
    def __init__(self, options: List[ShippingOption] | None = None) -> None:
        self.options = options if options is not None else [
            ShippingOption(
                id="1",
                carrier="Correios",
                name="PAC",
                price_cents=2350,
                delivery_time_days=7,
            ),
            ShippingOption(
                id="2",
                carrier="Correios",
                name="SEDEX",
                price_cents=4190,
                delivery_time_days=2,
            ),
        ]
        self.calls: list = []

    def quote(self, postal_code, items):
        self.calls.append((postal_code, list(items)))
        return self.options


class FakePaymentGateway(PaymentGateway):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list = []

    def create_preference(self, items, payer, external_reference):
        self.calls.append(
            {"items": list(items), "payer": payer, "external_reference": external_reference}
        )
        if self.fail:
            raise PaymentGatewayFailure("Payment provider is unavailable.")
        return PaymentPreference(
            preference_id="pref-123",
            redirect_url="https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=pref-123",
        )


@pytest.fixture()
def fake_shipping():
    return FakeShippingGateway()


@pytest.fixture()
def fake_payment():
    return FakePaymentGateway()


@pytest.fixture()
def patched_gateways(monkeypatch, fake_shipping, fake_payment):
    """Route the HTTP gateways built by the views to the in-memory doubles."""
    monkeypatch.setattr(
        MelhorEnvioShippingGateway,
        "quote",
        lambda self, postal_code, items: fake_shipping.quote(postal_code, items),
    )
    monkeypatch.setattr(
        MercadoPagoPaymentGateway,
        "create_preference",
        lambda self, items, payer, external_reference: fake_payment.create_preference(
            items, payer, external_reference
        ),
    )
    return fake_shipping, fake_payment
