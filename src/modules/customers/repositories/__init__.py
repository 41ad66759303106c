"""Customer repositories package."""

from modules.customers.repositories.django_repository import (
    AddressDjangoRepository,
    CustomerDjangoRepository,
)
from modules.customers.repositories.interfaces import (
    IAddressRepository,
    ICustomerRepository,
)

__all__ = [
    "AddressDjangoRepository",
    "CustomerDjangoRepository",
    "IAddressRepository",
    "ICustomerRepository",
]
