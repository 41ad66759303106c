"""Order domain exceptions.

Raised by the Service Layer; the API layer (Views) translates them into
HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The order does not exist or belongs to another customer."""
