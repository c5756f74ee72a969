"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class OrderNotFound(Exception):
    """The order does not exist or does not belong to the caller."""


class InvalidOrderStatus(Exception):
    """The order's current status does not allow the requested operation."""


class InsufficientStock(Exception):
    """Not enough stock to fulfil an order line."""

    def __init__(self, product_name: str, requested: int, available: int) -> None:
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name}: "
            f"requested {requested}, available {available}."
        )


class OrderNumberExhausted(Exception):
    """No free order number could be generated for today."""
