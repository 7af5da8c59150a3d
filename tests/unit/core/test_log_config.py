"""Unit tests for the structlog masking processor and logging config."""

import pytest

from modules.core.log_config import (
    MASK,
    build_logging_config,
    mask_sensitive_data,
)

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_password_masked(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert MASK in result["data"]

    def test_token_masked(self):
        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert MASK in result["header"]

    def test_authorization_header_masked(self):
        event_dict = {"event": "test", "raw": "authorization: eyJhbGciOi.payload.sig"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "eyJhbGciOi" not in result["raw"]

    def test_sensitive_key_masked_wholesale(self):
        event_dict = {"event": "auth.token_issued", "refresh": "eyJ.refresh.sig"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["refresh"] == MASK

    def test_nested_dict_masked(self):
        event_dict = {
            "event": "api.request",
            "payload": {"username": "ana", "password": "hunter2"},
        }
        result = mask_sensitive_data(None, None, event_dict)
        assert result["payload"] == {"username": "ana", "password": MASK}

    def test_payment_intent_unchanged(self):
        event_dict = {"event": "order.payment_processed", "payment_intent_id": "pi_123"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["payment_intent_id"] == "pi_123"

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "order.created", "order_number": "AC-261019-0001", "item_count": 2}
        result = mask_sensitive_data(None, None, event_dict)
        assert result == {
            "event": "order.created",
            "order_number": "AC-261019-0001",
            "item_count": 2,
        }


class TestLoggingConfig:
    def test_level_is_applied_to_root_and_django(self):
        config = build_logging_config("WARNING")
        assert config["root"]["level"] == "WARNING"
        assert config["loggers"]["django"]["level"] == "WARNING"

    def test_console_uses_json_formatter(self):
        config = build_logging_config()
        assert config["handlers"]["console"]["formatter"] == "json"
