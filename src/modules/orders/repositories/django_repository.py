"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Write operations are wrapped in ``transaction.atomic()`` so the Order
aggregate (Order + OrderItems) is persisted atomically.

Concurrency control on cancellation uses ``select_for_update()``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count

from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically."""
        order = Order(
            user_id=data["user_id"],
            shipping_address=data.get("shipping_address"),
            notes=data.get("notes"),
            payment_method=data.get("payment_method"),
        )
        order.save()

        total = Decimal("0.00")
        items = data.get("items", [])
        for item_data in items:
            item = OrderItem(
                order=order,
                product_id=item_data["product_id"],
                quantity=item_data["quantity"],
                price=item_data["price"],
                attributes=item_data.get("attributes"),
            )
            item.save()
            total += item.total_price

        order.total_amount = total
        order.save(update_fields=["total_amount"])

        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Retrieve an order with eager-loaded items and products.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Order.objects.prefetch_related("items__product")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_user(self, id: Any, user_id: int) -> Optional[Order]:
        try:
            return (
                Order.objects.prefetch_related("items__product")
                .filter(id=id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update_for_user(self, id: Any, user_id: int) -> Optional[Order]:
        """Retrieve an owned order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside a transaction.  Items are prefetched so the
        caller can iterate over them while the row is locked.
        """
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items__product")
                .filter(id=id, user_id=user_id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional Django ORM look-ups."""
        queryset = Order.objects.prefetch_related("items__product")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def list_by_user(
        self,
        user_id: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Order], int]:
        """One page of the user's orders, newest first, plus the total count.

        ``search`` is a case-insensitive substring of the order number
        (``ICONTAINS``), so ``ord-2506`` finds ``ORD-250615-0042`` on every
        backend.
        """
        queryset = Order.objects.filter(user_id=user_id)
        if status:
            queryset = queryset.filter(status=status)
        if search:
            queryset = queryset.filter(order_number__icontains=search)

        total = queryset.count()
        page = (
            queryset.annotate(item_count=Count("items"))
            .order_by("-created_at", "-id")[offset : offset + limit]
        )
        return list(page), total

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order."""
        entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        """Hard-delete an order and its items.

        Orders are normally cancelled, not deleted; this exists for
        administrative clean-up.
        """
        order = self.get_by_id(id)
        if not order:
            return False
        order.delete()
        logger.info("order.deleted", order_id=str(id))
        return True
