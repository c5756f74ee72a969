import pytest

from config.structured_logging import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    @pytest.mark.parametrize(
        ("value", "secret"),
        [
            ("password='s3cret123'", "s3cret123"),
            ("token=abc123xyz", "abc123xyz"),
            ("authorization: Bearer-eyJhbGci", "Bearer-eyJhbGci"),
            ("refresh=eyJ0eXAiOiJKV1Qi", "eyJ0eXAiOiJKV1Qi"),
            ("client_secret=abcdef", "abcdef"),
        ],
    )
    def test_sensitive_values_are_masked(self, value, secret):
        result = mask_sensitive_data(None, None, {"event": "test", "data": value})
        assert secret not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "order.created", "order_number": "ORD-250615-0042"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result == {"event": "order.created", "order_number": "ORD-250615-0042"}

    def test_non_string_values_are_left_alone(self):
        result = mask_sensitive_data(None, None, {"event": "test", "quantity": 3})
        assert result["quantity"] == 3
