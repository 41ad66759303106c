"""Customer profile and shipping addresses.

Business rules implemented:
- Each authenticated user owns at most one customer profile.
- CPF is stored as digits only and validated with *validate-docbr*.
- CPF is masked in ``__str__`` so it never leaks into logs.
- Addresses belong to exactly one customer; checkout only accepts an
  address owned by the caller.
"""

from __future__ import annotations

import re

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from validate_docbr import CPF

from modules.core.models import BaseModel

logger = structlog.get_logger(__name__)


def only_digits(value: str) -> str:
    """Strip all non-digit characters."""
    return re.sub(r"\D", "", value or "")


class Customer(BaseModel):
    """Buyer profile attached to an auth user; also the payment payer."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="customer",
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254)
    document = models.CharField(max_length=11, blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]

    def clean(self) -> None:
        super().clean()
        self.document = only_digits(self.document)
        if self.document and not CPF().validate(self.document):
            logger.warning(
                "customer.invalid_document",
                document_suffix=self.document[-4:],
            )
            raise ValidationError({"document": "Invalid CPF number."})

    def save(self, *args, **kwargs) -> None:
        self.document = only_digits(self.document)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        suffix = self.document[-4:] if self.document else "????"
        return f"{self.name} (CPF: ***{suffix})"


class Address(BaseModel):
    """Delivery address; ``postal_code`` is the 8-digit CEP."""

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    postal_code = models.CharField(max_length=8)
    street = models.CharField(max_length=255)
    number = models.CharField(max_length=20)
    complement = models.CharField(max_length=255, blank=True, default="")
    district = models.CharField(max_length=120, blank=True, default="")
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=2)

    class Meta:
        db_table = "addresses"
        ordering = ["-created_at"]

    def save(self, *args, **kwargs) -> None:
        self.postal_code = only_digits(self.postal_code)[:8]
        self.state = (self.state or "").upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.street}, {self.number} - {self.city}/{self.state} ({self.postal_code})"
