"""Integration tests for the order list and detail endpoints."""

from __future__ import annotations

from uuid import uuid4

import pytest
from rest_framework.test import APIClient

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


def _place(client: APIClient, product, quantity: int = 1) -> dict:
    response = client.post(
        URL,
        {"items": [{"productId": str(product.id), "quantity": quantity}]},
        format="json",
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture()
def product(make_product):
    return make_product(stock_quantity=100)


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


class TestListOrders:
    def test_paginated_envelope(self, auth_client, product):
        placed = [_place(auth_client, product) for _ in range(3)]

        response = auth_client.get(URL, {"page": 1, "limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert (data["total"], data["page"], data["limit"], data["totalPages"]) == (
            3,
            1,
            2,
            2,
        )
        assert [o["id"] for o in data["items"]] == [placed[2]["id"], placed[1]["id"]]
        assert data["items"][0]["itemCount"] == 1
        assert data["items"][0]["updatedAt"] == placed[2]["updatedAt"]
        assert set(data["items"][0]) == {
            "id",
            "orderNumber",
            "status",
            "totalAmount",
            "itemCount",
            "createdAt",
            "updatedAt",
        }

    def test_defaults_to_first_page_of_ten(self, auth_client):
        data = auth_client.get(URL).json()
        assert (data["page"], data["limit"], data["total"], data["items"]) == (
            1,
            10,
            0,
            [],
        )

    def test_only_own_orders(self, auth_client, other_client, product):
        _place(other_client, product)
        assert auth_client.get(URL).json()["total"] == 0

    def test_status_and_search_filters(self, auth_client, product):
        first = _place(auth_client, product)
        second = _place(auth_client, product)
        auth_client.post(f"{URL}{first['id']}/cancel/", {}, format="json")

        cancelled = auth_client.get(URL, {"status": "CANCELLED"}).json()
        assert [o["id"] for o in cancelled["items"]] == [first["id"]]

        found = auth_client.get(URL, {"search": second["orderNumber"].lower()}).json()
        assert second["id"] in [o["id"] for o in found["items"]]

    @pytest.mark.parametrize(
        "params", [{"status": "LOST"}, {"page": "0"}, {"limit": "-1"}, {"page": "x"}]
    )
    def test_invalid_params_return_400(self, auth_client, params):
        response = auth_client.get(URL, params)
        assert response.status_code == 400
        assert "detail" in response.json()


class TestRetrieveOrder:
    def test_owner_gets_projection(self, auth_client, product):
        placed = _place(auth_client, product, quantity=3)
        response = auth_client.get(f"{URL}{placed['id']}/")
        assert response.status_code == 200
        assert response.json() == placed

    def test_other_user_gets_404(self, auth_client, other_client, product):
        placed = _place(auth_client, product)
        response = other_client.get(f"{URL}{placed['id']}/")
        assert response.status_code == 404
        assert response.json() == {"detail": "Order not found."}

    @pytest.mark.parametrize("order_id", ["not-a-uuid", uuid4()])
    def test_missing_or_malformed_id_returns_404(self, auth_client, order_id):
        assert auth_client.get(f"{URL}{order_id}/").status_code == 404
