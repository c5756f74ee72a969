"""Order and OrderItem models.

Rules the models enforce themselves:
- Order number auto-generated as ``ORD-YYMMDD-NNNN`` (local date).
- Only PENDING, PAID and PROCESSING orders can be cancelled.
- User FK uses PROTECT to preserve purchase history.
- OrderItem snapshots the product price at placement time (``price``).
- OrderItem ``total_price`` is always ``quantity * price`` (calculated on save).
- Items are removed together with their order (CASCADE).
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any, Optional

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_STATES,
    CLOSED_STATES,
    ORDER_NUMBER_MAX_RETRIES,
    ORDER_NUMBER_PREFIX,
    SHIPPED_STATES,
    OrderStatus,
)
from modules.orders.exceptions import InvalidOrderStatus, OrderNumberExhausted
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, BaseModel):
    """A customer purchase and the aggregate root for its items.

    ``order_number`` is a human-readable identifier generated on first
    save.  The UUIDv7 ``id`` is used for all internal references and API
    look-ups.
    """

    order_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    payment_method: models.CharField = models.CharField(
        max_length=50, null=True, blank=True
    )
    payment_id: models.CharField = models.CharField(
        max_length=100, null=True, blank=True
    )
    shipping_address: models.TextField = models.TextField(null=True, blank=True)
    shipping_code: models.CharField = models.CharField(
        max_length=100, null=True, blank=True
    )
    notes: models.TextField = models.TextField(null=True, blank=True)
    cancel_reason: models.TextField = models.TextField(null=True, blank=True)
    refund_reason: models.TextField = models.TextField(null=True, blank=True)
    paid_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    shipped_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    cancelled_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    refunded_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="orders_user_created_idx"),
            models.Index(fields=["status"], name="orders_status_idx"),
        ]

    # ------------------------------------------------------------------
    # Cancellation rules
    # ------------------------------------------------------------------

    def can_cancel(self) -> bool:
        return self.status in CANCELLABLE_STATES

    def cancel(self, reason: Optional[str] = None) -> None:
        """Move the order to CANCELLED.

        Stock restoration is the caller's job; this only changes state.

        Raises:
            InvalidOrderStatus: if the order has shipped or is already closed.
        """
        if self.status in SHIPPED_STATES:
            raise InvalidOrderStatus("Order has already been shipped or delivered.")
        if self.status in CLOSED_STATES:
            raise InvalidOrderStatus("Order has already been cancelled.")
        if not self.can_cancel():
            raise InvalidOrderStatus(f"Cannot cancel order in status {self.status}.")

        self.status = OrderStatus.CANCELLED
        self.cancel_reason = reason
        self.cancelled_at = timezone.now()

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        """Generate a human-readable order number: ``ORD-YYMMDD-NNNN``."""
        today = timezone.localdate()
        suffix = secrets.randbelow(10000)
        return f"{ORDER_NUMBER_PREFIX}-{today:%y%m%d}-{suffix:04d}"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def allocate_order_number(cls) -> str:
        """Draw numbers until one is unused, giving up after a few collisions."""
        for attempt in range(1, ORDER_NUMBER_MAX_RETRIES + 1):
            candidate = cls.generate_order_number()
            if not cls.objects.filter(order_number=candidate).exists():
                return candidate
            logger.warning(
                "order.number_collision", order_number=candidate, attempt=attempt
            )
        raise OrderNumberExhausted(
            f"No free order number after {ORDER_NUMBER_MAX_RETRIES} draws."
        )

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            self.order_number = self.allocate_order_number()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """One product line of an order.

    ``price`` is a snapshot of the product price at the time of purchase;
    it never changes even if the product price is updated later.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
    )
    total_price: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )
    attributes: models.CharField = models.CharField(
        max_length=500, null=True, blank=True
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.total_price = self.price * self.quantity
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} ({self.total_price})"
