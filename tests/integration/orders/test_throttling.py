"""Integration tests for scoped throttling on the orders API."""

from __future__ import annotations

import pytest
from rest_framework.settings import api_settings
from rest_framework.throttling import ScopedRateThrottle

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


@pytest.fixture()
def tight_rates(monkeypatch):
    rates = {**api_settings.DEFAULT_THROTTLE_RATES}
    rates.update({"order_creation": "2/minute", "order_listing": "3/minute"})
    monkeypatch.setattr(ScopedRateThrottle, "THROTTLE_RATES", rates)
    return rates


def test_order_creation_is_throttled(auth_client, make_product, tight_rates):
    product = make_product(stock_quantity=50)
    payload = {"items": [{"productId": str(product.id), "quantity": 1}]}

    statuses = [
        auth_client.post(URL, payload, format="json").status_code for _ in range(3)
    ]
    assert statuses == [200, 200, 429]


def test_order_listing_is_throttled(auth_client, tight_rates):
    statuses = [auth_client.get(URL).status_code for _ in range(4)]
    assert statuses == [200, 200, 200, 429]


def test_cancel_uses_no_order_scope(auth_client, tight_rates):
    # listing budget is spent, cancellation is still answered normally
    for _ in range(3):
        auth_client.get(URL)
    response = auth_client.post(
        f"{URL}00000000-0000-0000-0000-000000000000/cancel/", {}, format="json"
    )
    assert response.status_code == 404
