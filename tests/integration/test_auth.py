"""Integration tests for JWT authentication (SimpleJWT + blacklist)."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

TOKEN_URL = "/api/v1/auth/token/"


@pytest.fixture()
def tokens(api_client, user):
    response = api_client.post(
        TOKEN_URL, {"username": "buyer", "password": "testpass123"}, format="json"
    )
    assert response.status_code == 200
    return response.json()


class TestTokenFlow:
    def test_obtain_pair(self, tokens):
        assert {"access", "refresh"} <= set(tokens)

    def test_wrong_password_is_rejected(self, api_client, user):
        response = api_client.post(
            TOKEN_URL, {"username": "buyer", "password": "nope"}, format="json"
        )
        assert response.status_code == 401

    def test_me_with_valid_token(self, api_client, user, tokens):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        response = api_client.get("/api/v1/me")
        assert response.status_code == 200
        assert response.json() == {"id": user.pk, "username": "buyer"}

    def test_me_without_token(self, api_client):
        assert api_client.get("/api/v1/me").status_code == 401

    def test_me_with_garbage_token(self, api_client):
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        assert api_client.get("/api/v1/me").status_code == 401

    def test_orders_accept_bearer_token(self, api_client, tokens):
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")
        assert api_client.get("/api/v1/orders/").status_code == 200

    def test_verify(self, api_client, tokens):
        response = api_client.post(
            f"{TOKEN_URL}verify/", {"token": tokens["access"]}, format="json"
        )
        assert response.status_code == 200


class TestLogout:
    def test_blacklisted_refresh_token_cannot_be_reused(self, api_client, tokens):
        response = api_client.post(
            f"{TOKEN_URL}blacklist/", {"refresh": tokens["refresh"]}, format="json"
        )
        assert response.status_code == 200

        response = api_client.post(
            f"{TOKEN_URL}refresh/", {"refresh": tokens["refresh"]}, format="json"
        )
        assert response.status_code == 401

    def test_refresh_rotates_token(self, api_client, tokens):
        response = api_client.post(
            f"{TOKEN_URL}refresh/", {"refresh": tokens["refresh"]}, format="json"
        )
        assert response.status_code == 200
        assert response.json()["refresh"] != tokens["refresh"]
