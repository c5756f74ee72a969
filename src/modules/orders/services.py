"""Order service layer (Use Cases).

Orchestrates order placement, the per-user read projections and
cancellation.  All write operations are atomic: the service defines the
unit-of-work boundary.

Business rules enforced:
- The ordering user must exist and be active.
- Every referenced product is locked before any stock is touched, in
  primary-key order, so concurrent orders cannot deadlock.
- Stock is decremented with a conditional update and never goes negative.
- A line's price is a snapshot of the product's base price.
- Orders are only visible to, and cancellable by, their owner.
- Cancellation restores the stock of every line exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional
from uuid import UUID

import structlog
from django.db import transaction

from modules.accounts.exceptions import UserNotFound
from modules.orders.dtos import OrderListQueryDTO, PaginatedOrdersDTO
from modules.orders.events import OrderCancelled, OrderCreated
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    OrderNotFound,
)
from modules.products.exceptions import ProductNotFound
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.accounts.repositories.interfaces import IUserRepository
    from modules.orders.dtos import CreateOrderDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories (and optionally the event bus) via constructor
    injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        product_repository: IProductRepository,
        event_bus: Optional[IEventBus] = None,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._product_repo = product_repository
        self._event_bus = event_bus or default_event_bus

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, user_id: int, dto: CreateOrderDTO) -> Order:
        """Place an order and reserve stock for every line.

        Steps:
        1. Validate the user exists.
        2. Lock every referenced product (SELECT FOR UPDATE, pk order).
        3. For each line, in request order:
           - Validate the product exists.
           - Validate stock left after earlier lines covers the quantity.
           - Snapshot the base price.
           - Decrement stock with a conditional update.
        4. Persist order + items atomically.

        Raises:
            UserNotFound: the user does not exist.
            ProductNotFound: a product does not exist.
            InsufficientStock: not enough stock for a line.
        """
        log = logger.bind(user_id=user_id)
        log.info("order.creation_started", lines=len(dto.items))

        if not self._user_repo.get_by_id(user_id):
            raise UserNotFound(f"User {user_id} not found.")

        products = self._product_repo.lock_many(item.product_id for item in dto.items)
        remaining: Dict[UUID, int] = {
            pid: product.stock_quantity for pid, product in products.items()
        }

        repo_items = []
        for item_dto in dto.items:
            product = products.get(item_dto.product_id)
            if product is None:
                log.warning("order.product_missing", product_id=str(item_dto.product_id))
                raise ProductNotFound(f"Product {item_dto.product_id} not found.")

            available = remaining[product.id]
            if available < item_dto.quantity or not self._product_repo.reserve_stock(
                product.id, item_dto.quantity
            ):
                log.warning(
                    "order.insufficient_stock",
                    product_id=str(product.id),
                    requested=item_dto.quantity,
                    available=available,
                )
                raise InsufficientStock(product.name, item_dto.quantity, available)

            remaining[product.id] = available - item_dto.quantity
            log.info(
                "order.stock_reserved",
                product_id=str(product.id),
                quantity=item_dto.quantity,
                remaining=remaining[product.id],
            )

            repo_items.append(
                {
                    "product_id": product.id,
                    "quantity": item_dto.quantity,
                    "price": product.price,
                    "attributes": item_dto.attributes,
                }
            )

        order = self._order_repo.create(
            {
                "user_id": user_id,
                "items": repo_items,
                "shipping_address": dto.shipping_address,
                "notes": dto.notes,
                "payment_method": dto.payment_method,
            }
        )

        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                user_id=user_id,
                order_number=order.order_number,
                total_amount=str(order.total_amount),
            )
        )
        self._event_bus.publish_on_commit(order.pull_domain_events())

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total_amount=str(order.total_amount),
        )
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def cancel_order(
        self, order_id: Any, user_id: int, reason: Optional[str] = None
    ) -> Order:
        """Cancel an owned order and restore the stock of its lines.

        The order row is locked first so concurrent cancellations cannot
        restore stock twice.

        Raises:
            OrderNotFound: the order does not exist or is not owned.
            InvalidOrderStatus: the order has shipped or is already closed.
        """
        order = self._order_repo.get_for_update_for_user(order_id, user_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(order_id=str(order.id), current_status=order.status)

        try:
            order.cancel(reason)
        except InvalidOrderStatus:
            log.warning("order.cancel_not_allowed")
            raise

        for item in sorted(order.items.all(), key=lambda i: i.product_id):
            self._product_repo.release_stock(item.product_id, item.quantity)
            log.info(
                "order.stock_released",
                product_id=str(item.product_id),
                quantity=item.quantity,
            )

        self._order_repo.save(order)

        order.add_domain_event(
            OrderCancelled(
                aggregate_id=order.id,
                user_id=user_id,
                order_number=order.order_number,
                reason=reason or "",
            )
        )
        self._event_bus.publish_on_commit(order.pull_domain_events())

        log.info("order.cancelled", reason=reason)
        return self._order_repo.get_for_user(order.id, user_id) or order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order_detail(self, order_id: Any, user_id: int) -> Order:
        """Retrieve one of the user's orders.

        Raises:
            OrderNotFound: the order does not exist, is not owned or the id
                is malformed.
        """
        order = self._order_repo.get_for_user(order_id, user_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders_by_user(
        self, user_id: int, query: OrderListQueryDTO
    ) -> PaginatedOrdersDTO:
        """Return one page of the user's orders, newest first."""
        orders, total = self._order_repo.list_by_user(
            user_id,
            status=query.status,
            search=query.search,
            offset=query.offset,
            limit=query.limit,
        )
        return PaginatedOrdersDTO.build(orders, total, query.page, query.limit)
