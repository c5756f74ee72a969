"""Unit tests for OrderService with mocked repositories."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import InsufficientStock, OrderNotFound
from modules.orders.services import OrderService

pytestmark = pytest.mark.unit


@dataclass
class StubProduct:
    id: UUID
    name: str
    stock_quantity: int
    price: Decimal


@pytest.fixture()
def service_and_repos():
    order_repo = MagicMock()
    user_repo = MagicMock()
    product_repo = MagicMock()
    bus = MagicMock()
    service = OrderService(order_repo, user_repo, product_repo, event_bus=bus)
    return service, order_repo, user_repo, product_repo, bus


class TestCreateOrder:
    def test_passes_snapshots_to_repository(self, service_and_repos):
        service, order_repo, _, product_repo, bus = service_and_repos
        a = StubProduct(uuid4(), "A", 10, Decimal("10.00"))
        b = StubProduct(uuid4(), "B", 5, Decimal("25.50"))
        product_repo.lock_many.return_value = {a.id: a, b.id: b}
        product_repo.reserve_stock.return_value = True

        dto = CreateOrderDTO(
            items=[
                CreateOrderItemDTO(product_id=b.id, quantity=1),
                CreateOrderItemDTO(product_id=a.id, quantity=2, attributes="blue"),
            ],
            notes="unit",
        )
        service.create_order(7, dto)

        data = order_repo.create.call_args.args[0]
        assert data["user_id"] == 7
        assert data["notes"] == "unit"
        assert data["items"] == [
            {
                "product_id": b.id,
                "quantity": 1,
                "price": Decimal("25.50"),
                "attributes": None,
            },
            {
                "product_id": a.id,
                "quantity": 2,
                "price": Decimal("10.00"),
                "attributes": "blue",
            },
        ]
        assert [c.args for c in product_repo.reserve_stock.call_args_list] == [
            (b.id, 1),
            (a.id, 2),
        ]
        bus.publish_on_commit.assert_called_once()

    def test_conditional_update_failure_is_insufficient_stock(self, service_and_repos):
        service, order_repo, _, product_repo, bus = service_and_repos
        a = StubProduct(uuid4(), "A", 10, Decimal("10.00"))
        product_repo.lock_many.return_value = {a.id: a}
        product_repo.reserve_stock.return_value = False

        with pytest.raises(InsufficientStock):
            service.create_order(
                7, CreateOrderDTO(items=[CreateOrderItemDTO(product_id=a.id, quantity=1)])
            )
        order_repo.create.assert_not_called()
        bus.publish_on_commit.assert_not_called()

    def test_stock_check_happens_before_reserving(self, service_and_repos):
        service, _, _, product_repo, _ = service_and_repos
        a = StubProduct(uuid4(), "A", 1, Decimal("10.00"))
        product_repo.lock_many.return_value = {a.id: a}

        with pytest.raises(InsufficientStock) as exc:
            service.create_order(
                7, CreateOrderDTO(items=[CreateOrderItemDTO(product_id=a.id, quantity=2)])
            )
        assert str(exc.value) == "Insufficient stock for A: requested 2, available 1."
        product_repo.reserve_stock.assert_not_called()


class TestCancelOrder:
    def test_missing_order_raises_without_touching_stock(self, service_and_repos):
        service, order_repo, _, product_repo, _ = service_and_repos
        order_repo.get_for_update_for_user.return_value = None

        with pytest.raises(OrderNotFound):
            service.cancel_order(uuid4(), 7)
        product_repo.release_stock.assert_not_called()
