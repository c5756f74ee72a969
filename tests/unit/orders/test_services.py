"""Unit tests for OrderService backed by the Django repositories.

Covers:
- Order creation with stock reservation and price snapshots.
- Insufficient stock and missing products roll everything back.
- Duplicate product lines share one stock budget.
- Owner-scoped detail look-up and paginated listing.
- Cancellation with stock restoration and status rules.
- Domain events published after commit.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories import UserDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, OrderListQueryDTO
from modules.orders.events import OrderCancelled, OrderCreated
from modules.orders.exceptions import (
    InsufficientStock,
    InvalidOrderStatus,
    OrderNotFound,
)
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.exceptions import ProductNotFound
from modules.products.models import Product
from modules.products.repositories import ProductDjangoRepository
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class RecordingHandler:
    def __init__(self) -> None:
        self.events = []

    def __call__(self, event) -> None:
        self.events.append(event)


@pytest.fixture()
def bus():
    return InMemoryEventBus()


@pytest.fixture()
def service(bus):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        user_repository=UserDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        event_bus=bus,
    )


@pytest.fixture()
def product_a(make_product):
    return make_product(name="Product A", price=Decimal("10000.00"), stock_quantity=10)


@pytest.fixture()
def product_b(make_product):
    return make_product(name="Product B", price=Decimal("2550.00"), stock_quantity=5)


def _dto(*lines, **extra) -> CreateOrderDTO:
    return CreateOrderDTO(
        items=[
            CreateOrderItemDTO(product_id=product.id, quantity=quantity)
            for product, quantity in lines
        ],
        **extra,
    )


def _stock(product: Product) -> int:
    product.refresh_from_db()
    return product.stock_quantity


# ---------------------------------------------------------------------------
# create_order
# ---------------------------------------------------------------------------


class TestCreateOrder:
    def test_reserves_stock_and_creates_pending_order(self, service, user, product_a):
        order = service.create_order(user.pk, _dto((product_a, 2)))

        assert _stock(product_a) == 8
        assert order.status == OrderStatus.PENDING
        assert order.user_id == user.pk
        assert order.total_amount == Decimal("20000.00")
        (item,) = order.items.all()
        assert item.quantity == 2
        assert item.price == Decimal("10000.00")
        assert item.total_price == Decimal("20000.00")

    def test_total_is_sum_of_lines(self, service, user, product_a, product_b):
        order = service.create_order(user.pk, _dto((product_a, 1), (product_b, 3)))
        assert order.total_amount == sum(i.total_price for i in order.items.all())
        assert order.total_amount == Decimal("17650.00")

    def test_price_snapshot_is_base_price(self, service, user, make_product):
        discounted = make_product(price=Decimal("10000.00"), discount_rate=50)
        order = service.create_order(user.pk, _dto((discounted, 1)))
        assert order.items.get().price == Decimal("10000.00")

    def test_price_snapshot_survives_later_price_change(
        self, service, user, product_a
    ):
        order = service.create_order(user.pk, _dto((product_a, 2)))

        product_a.price = Decimal("99000.00")
        product_a.save()

        reloaded = service.get_order_detail(order.id, user.pk)
        (item,) = reloaded.items.all()
        assert item.price == Decimal("10000.00")
        assert item.total_price == Decimal("20000.00")
        assert reloaded.total_amount == Decimal("20000.00")

    def test_optional_fields_are_stored(self, service, user, product_a):
        dto = CreateOrderDTO(
            items=[
                CreateOrderItemDTO(product_id=product_a.id, quantity=1, attributes="L")
            ],
            shipping_address="1 Main St",
            notes="ring twice",
            payment_method="card",
        )
        order = service.create_order(user.pk, dto)
        assert order.shipping_address == "1 Main St"
        assert order.notes == "ring twice"
        assert order.payment_method == "card"
        assert order.items.get().attributes == "L"

    def test_insufficient_stock_keeps_stock_untouched(
        self, service, user, make_product
    ):
        scarce = make_product(name="Scarce", stock_quantity=1)
        with pytest.raises(InsufficientStock) as exc:
            service.create_order(user.pk, _dto((scarce, 2)))

        assert exc.value.available == 1
        assert exc.value.product_name == "Scarce"
        assert _stock(scarce) == 1
        assert Order.objects.count() == 0

    def test_failure_on_later_line_rolls_back_earlier_lines(
        self, service, user, product_a, make_product
    ):
        scarce = make_product(name="Scarce", stock_quantity=1)
        with pytest.raises(InsufficientStock):
            service.create_order(user.pk, _dto((product_a, 3), (scarce, 5)))

        assert _stock(product_a) == 10
        assert Order.objects.count() == 0

    def test_missing_product_rolls_back(self, service, user, product_a):
        dto = CreateOrderDTO(
            items=[
                CreateOrderItemDTO(product_id=product_a.id, quantity=1),
                CreateOrderItemDTO(product_id=uuid4(), quantity=1),
            ]
        )
        with pytest.raises(ProductNotFound):
            service.create_order(user.pk, dto)
        assert _stock(product_a) == 10

    def test_soft_deleted_product_is_not_found(self, service, user, product_a):
        product_a.delete()
        with pytest.raises(ProductNotFound):
            service.create_order(user.pk, _dto((product_a, 1)))

    def test_duplicate_lines_share_the_stock_budget(self, service, user, make_product):
        product = make_product(stock_quantity=5)
        order = service.create_order(user.pk, _dto((product, 2), (product, 3)))
        assert order.items.count() == 2
        assert _stock(product) == 0

    def test_duplicate_lines_exceeding_stock_fail(self, service, user, make_product):
        product = make_product(stock_quantity=5)
        with pytest.raises(InsufficientStock) as exc:
            service.create_order(user.pk, _dto((product, 3), (product, 3)))
        assert exc.value.available == 2
        assert _stock(product) == 5

    def test_unknown_user_raises(self, service, product_a):
        with pytest.raises(UserNotFound):
            service.create_order(987654, _dto((product_a, 1)))
        assert _stock(product_a) == 10

    def test_publishes_order_created_after_commit(
        self, service, bus, user, product_a, django_capture_on_commit_callbacks
    ):
        handler = RecordingHandler()
        bus.subscribe(OrderCreated, handler)

        with django_capture_on_commit_callbacks(execute=True):
            order = service.create_order(user.pk, _dto((product_a, 1)))

        (event,) = handler.events
        assert event.aggregate_id == order.id
        assert event.order_number == order.order_number
        assert event.user_id == user.pk

    def test_failed_order_publishes_nothing(
        self, service, bus, user, make_product, django_capture_on_commit_callbacks
    ):
        handler = RecordingHandler()
        bus.subscribe(OrderCreated, handler)
        scarce = make_product(stock_quantity=0)

        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(InsufficientStock):
                service.create_order(user.pk, _dto((scarce, 1)))

        assert handler.events == []


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestGetOrderDetail:
    def test_owner_gets_order(self, service, user, product_a):
        order = service.create_order(user.pk, _dto((product_a, 1)))
        assert service.get_order_detail(order.id, user.pk).id == order.id

    def test_other_user_gets_not_found(self, service, user, other_user, product_a):
        order = service.create_order(user.pk, _dto((product_a, 1)))
        with pytest.raises(OrderNotFound):
            service.get_order_detail(order.id, other_user.pk)

    @pytest.mark.parametrize("order_id", ["garbage", uuid4()])
    def test_malformed_or_unknown_id_is_not_found(self, service, user, order_id):
        with pytest.raises(OrderNotFound):
            service.get_order_detail(order_id, user.pk)


class TestListOrdersByUser:
    @pytest.fixture()
    def orders(self, service, user, other_user, product_a, product_b):
        placed = [
            service.create_order(user.pk, _dto((product_a, 1))),
            service.create_order(user.pk, _dto((product_a, 1), (product_b, 1))),
            service.create_order(user.pk, _dto((product_b, 2))),
        ]
        service.create_order(other_user.pk, _dto((product_a, 1)))
        return placed

    def test_lists_only_own_orders_newest_first(self, service, user, orders):
        page = service.list_orders_by_user(user.pk, OrderListQueryDTO())
        assert page.total == 3
        assert [s.id for s in page.items] == [o.id for o in reversed(orders)]
        assert [s.item_count for s in page.items] == [1, 2, 1]

    def test_pagination(self, service, user, orders):
        page = service.list_orders_by_user(user.pk, OrderListQueryDTO(page=2, limit=2))
        assert page.total == 3
        assert page.total_pages == 2
        assert [s.id for s in page.items] == [orders[0].id]

    def test_page_past_the_end_is_empty(self, service, user, orders):
        page = service.list_orders_by_user(user.pk, OrderListQueryDTO(page=5, limit=2))
        assert page.items == []
        assert page.total == 3

    def test_status_filter(self, service, user, orders):
        service.cancel_order(orders[1].id, user.pk)
        page = service.list_orders_by_user(
            user.pk, OrderListQueryDTO(status=OrderStatus.CANCELLED)
        )
        assert [s.id for s in page.items] == [orders[1].id]

    def test_search_is_case_insensitive_substring(self, service, user, orders):
        number = orders[0].order_number
        page = service.list_orders_by_user(
            user.pk, OrderListQueryDTO(search=number.lower())
        )
        assert orders[0].id in [s.id for s in page.items]

    def test_user_without_orders(self, service, user):
        page = service.list_orders_by_user(user.pk, OrderListQueryDTO())
        assert (page.total, page.total_pages, page.items) == (0, 0, [])


# ---------------------------------------------------------------------------
# cancel_order
# ---------------------------------------------------------------------------


class TestCancelOrder:
    def test_restores_stock_for_every_line(
        self, service, user, product_a, product_b
    ):
        order = service.create_order(user.pk, _dto((product_a, 2), (product_b, 3)))
        assert (_stock(product_a), _stock(product_b)) == (8, 2)

        cancelled = service.cancel_order(order.id, user.pk, reason="changed mind")

        assert (_stock(product_a), _stock(product_b)) == (10, 5)
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancel_reason == "changed mind"
        assert cancelled.cancelled_at is not None

    @pytest.mark.parametrize(
        ("status", "message"),
        [
            (OrderStatus.SHIPPED, "shipped or delivered"),
            (OrderStatus.DELIVERED, "shipped or delivered"),
            (OrderStatus.REFUNDED, "already cancelled"),
        ],
    )
    def test_rejects_non_cancellable_orders(
        self, service, user, product_a, status, message
    ):
        order = service.create_order(user.pk, _dto((product_a, 2)))
        Order.objects.filter(id=order.id).update(status=status)

        with pytest.raises(InvalidOrderStatus, match=message):
            service.cancel_order(order.id, user.pk)

        order.refresh_from_db()
        assert order.status == status
        assert order.cancelled_at is None
        assert _stock(product_a) == 8

    def test_second_cancel_fails_and_does_not_restore_twice(
        self, service, user, product_a
    ):
        order = service.create_order(user.pk, _dto((product_a, 4)))
        service.cancel_order(order.id, user.pk)

        with pytest.raises(InvalidOrderStatus, match="already cancelled"):
            service.cancel_order(order.id, user.pk)
        assert _stock(product_a) == 10

    @pytest.mark.parametrize(
        "status", [OrderStatus.PAID, OrderStatus.PROCESSING]
    )
    def test_paid_and_processing_orders_can_be_cancelled(
        self, service, user, product_a, status
    ):
        order = service.create_order(user.pk, _dto((product_a, 1)))
        Order.objects.filter(id=order.id).update(status=status)
        assert service.cancel_order(order.id, user.pk).status == OrderStatus.CANCELLED

    def test_other_users_order_is_not_found(
        self, service, user, other_user, product_a
    ):
        order = service.create_order(user.pk, _dto((product_a, 2)))
        with pytest.raises(OrderNotFound):
            service.cancel_order(order.id, other_user.pk)
        assert _stock(product_a) == 8

    def test_publishes_order_cancelled_after_commit(
        self, service, bus, user, product_a, django_capture_on_commit_callbacks
    ):
        handler = RecordingHandler()
        bus.subscribe(OrderCancelled, handler)
        order = service.create_order(user.pk, _dto((product_a, 1)))

        with django_capture_on_commit_callbacks(execute=True):
            service.cancel_order(order.id, user.pk, reason="late")

        (event,) = handler.events
        assert event.aggregate_id == order.id
        assert event.reason == "late"
