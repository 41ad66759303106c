"""Immutable checkout configuration.

Integration settings are read from ``django.conf.settings`` exactly once
and frozen into ``CheckoutSettings``.  Gateways receive the object through
their constructor instead of reaching for module-level globals.
"""

from __future__ import annotations

from functools import lru_cache

from django.conf import settings
from pydantic import BaseModel, ConfigDict, Field


class CheckoutSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency_id: str = "BRL"
    default_quote_sku: str = "STACK-DUPLO"
    http_timeout: float = Field(default=10.0, gt=0)

    shipping_api_url: str
    shipping_api_token: str = ""
    shipping_origin_postal_code: str
    shipping_user_agent: str = "checkout-backend"

    payment_api_url: str
    payment_access_token: str = ""
    payment_success_url: str = ""
    payment_failure_url: str = ""
    payment_pending_url: str = ""
    payment_notification_url: str = ""

    @classmethod
    def from_django_settings(cls) -> CheckoutSettings:
        return cls(
            currency_id=settings.CHECKOUT_CURRENCY_ID,
            default_quote_sku=settings.CHECKOUT_DEFAULT_QUOTE_SKU,
            http_timeout=settings.CHECKOUT_HTTP_TIMEOUT,
            shipping_api_url=settings.SHIPPING_API_URL,
            shipping_api_token=settings.SHIPPING_API_TOKEN,
            shipping_origin_postal_code=settings.SHIPPING_ORIGIN_POSTAL_CODE,
            shipping_user_agent=settings.SHIPPING_USER_AGENT,
            payment_api_url=settings.PAYMENT_API_URL,
            payment_access_token=settings.PAYMENT_ACCESS_TOKEN,
            payment_success_url=settings.PAYMENT_SUCCESS_URL,
            payment_failure_url=settings.PAYMENT_FAILURE_URL,
            payment_pending_url=settings.PAYMENT_PENDING_URL,
            payment_notification_url=settings.PAYMENT_NOTIFICATION_URL,
        )


@lru_cache(maxsize=1)
def get_checkout_settings() -> CheckoutSettings:
    """Build the process-wide ``CheckoutSettings`` on first use."""
    return CheckoutSettings.from_django_settings()
