"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.  Python
attributes are snake_case; the HTTP contract is camelCase (aliases), and
both spellings are accepted on input.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO`` / ``CreateOrderDTO``: order placement.
- ``OrderListQueryDTO``: filters and pagination for a user's order list.
- ``CancelOrderDTO``: optional cancellation reason.
- ``OrderItemOutputDTO`` / ``OrderOutputDTO``: full order projection.
- ``OrderSummaryDTO`` / ``PaginatedOrdersDTO``: list projection.
"""

from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderItem

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class _CamelDTO(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderItemDTO(_CamelDTO):
    """A single order line in a creation request.

    The price is resolved by the Service Layer from the product catalog.
    """

    product_id: UUID
    quantity: int
    attributes: Optional[str] = Field(default=None, max_length=500)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateOrderDTO(_CamelDTO):
    """Immutable DTO for order creation requests.

    The same product may appear on several lines; each line is checked
    against the stock left by the previous ones.
    """

    items: List[CreateOrderItemDTO]
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    payment_method: Optional[str] = Field(default=None, max_length=50)

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v


class OrderListQueryDTO(_CamelDTO):
    status: Optional[OrderStatus] = None
    search: Optional[str] = None
    page: int = Field(default=DEFAULT_PAGE, ge=1)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1)

    @field_validator("search")
    @classmethod
    def blank_search_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class CancelOrderDTO(_CamelDTO):
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class OrderItemOutputDTO(_CamelDTO):
    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    price: Decimal
    total_price: Decimal
    attributes: Optional[str] = None
    product_image: Optional[str] = None

    @classmethod
    def from_entity(cls, item: OrderItem) -> OrderItemOutputDTO:
        product = item.product
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=product.name,
            quantity=item.quantity,
            price=item.price,
            total_price=item.total_price,
            attributes=item.attributes,
            product_image=product.thumbnail_url or None,
        )


class OrderOutputDTO(_CamelDTO):
    """Immutable DTO for the full order projection."""

    id: UUID
    order_number: str
    user_id: int
    status: str
    items: List[OrderItemOutputDTO]
    total_amount: Decimal
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    shipping_address: Optional[str] = None
    shipping_code: Optional[str] = None
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order model instance.

        Assumes ``items__product`` is prefetched.
        """
        return cls(
            id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            status=order.status,
            items=[OrderItemOutputDTO.from_entity(i) for i in order.items.all()],
            total_amount=order.total_amount,
            payment_method=order.payment_method,
            payment_id=order.payment_id,
            shipping_address=order.shipping_address,
            shipping_code=order.shipping_code,
            notes=order.notes,
            cancel_reason=order.cancel_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            paid_at=order.paid_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            refunded_at=order.refunded_at,
        )


class OrderSummaryDTO(_CamelDTO):
    """One row of a user's order list."""

    id: UUID
    order_number: str
    status: str
    total_amount: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, order: Order) -> OrderSummaryDTO:
        """Assumes the queryset was annotated with ``item_count``."""
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status,
            total_amount=order.total_amount,
            item_count=order.item_count,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class PaginatedOrdersDTO(_CamelDTO):
    items: List[OrderSummaryDTO]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(
        cls, orders: Sequence[Order], total: int, page: int, limit: int
    ) -> PaginatedOrdersDTO:
        return cls(
            items=[OrderSummaryDTO.from_entity(o) for o in orders],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
