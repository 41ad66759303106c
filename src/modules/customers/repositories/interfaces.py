"""Customer and address repository interfaces."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.models import Address, Customer


class ICustomerRepository(IRepository["Customer"]):
    """Repository contract for customer profiles."""

    @abstractmethod
    def get_by_user(self, user: Any) -> Optional[Customer]:
        """Return the profile owned by ``user``."""


class IAddressRepository(IRepository["Address"]):
    """Repository contract for delivery addresses."""

    @abstractmethod
    def get_for_customer(self, address_id: Any, customer: Customer) -> Optional[Address]:
        """Return the address only when ``customer`` owns it."""
