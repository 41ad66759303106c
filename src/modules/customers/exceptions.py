"""Customer domain exceptions.

Raised by repositories/services; the checkout views translate them into
HTTP responses.
"""

from __future__ import annotations


class CustomerNotFound(Exception):
    """The authenticated user has no customer profile."""


class AddressNotFound(Exception):
    """The address does not exist or belongs to another customer."""
