"""Django ORM implementation of the customer repositories.

Invalid identifiers (non-UUID strings, ``None``) yield ``None`` rather
than a database error.
"""

from __future__ import annotations

from typing import Any, Optional

from django.core.exceptions import ValidationError

from modules.customers.models import Address, Customer
from modules.customers.repositories.interfaces import (
    IAddressRepository,
    ICustomerRepository,
)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Customer]:
        try:
            return Customer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_by_user(self, user: Any) -> Optional[Customer]:
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return Customer.objects.filter(user_id=user.pk).first()


class AddressDjangoRepository(IAddressRepository):
    """Concrete Address repository backed by Django ORM."""

    def get_by_id(self, id: Any) -> Optional[Address]:
        try:
            return Address.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_customer(self, address_id: Any, customer: Customer) -> Optional[Address]:
        try:
            return Address.objects.filter(id=address_id, customer=customer).first()
        except (ValueError, ValidationError):
            return None
