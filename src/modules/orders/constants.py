"""Order domain constants.

Defines status choices and the groups of statuses that drive the
cancellation rules.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"
    REFUNDED = "REFUNDED", "Refunded"


CANCELLABLE_STATES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PROCESSING}
)

SHIPPED_STATES: frozenset[str] = frozenset(
    {OrderStatus.SHIPPED, OrderStatus.DELIVERED}
)

CLOSED_STATES: frozenset[str] = frozenset(
    {OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)

ORDER_NUMBER_PREFIX = "ORD"
ORDER_NUMBER_MAX_RETRIES = 5
