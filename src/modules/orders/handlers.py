"""Reactions to order lifecycle events.

Both handlers only write an audit line for now; they run after the order
transaction commits.
"""

from __future__ import annotations

import structlog

from modules.orders.events import OrderCancelled, OrderCreated
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@event_bus.on(OrderCreated)
def log_order_created(event: OrderCreated) -> None:
    logger.info(
        "order.event.created",
        order_id=str(event.aggregate_id),
        order_number=event.order_number,
        user_id=event.user_id,
        total_amount=event.total_amount,
    )


@event_bus.on(OrderCancelled)
def log_order_cancelled(event: OrderCancelled) -> None:
    logger.info(
        "order.event.cancelled",
        order_id=str(event.aggregate_id),
        order_number=event.order_number,
        user_id=event.user_id,
        reason=event.reason,
    )
