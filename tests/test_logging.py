"""Tests for logging setup and secret redaction."""

from __future__ import annotations

import structlog

from bitly_gateway.infra.logging import REDACTED, redact_secrets, setup_logging


class TestRedactSecrets:
    def test_masks_credential_keys(self) -> None:
        event = {
            "event": "decoded",
            "wallet_credential": "0xdeadbeef",
            "rpcApiKey": "key-123",
            "INFURA_API_KEY": "key-456",
        }
        out = redact_secrets(None, "info", event)
        assert out["wallet_credential"] == REDACTED
        assert out["rpcApiKey"] == REDACTED
        assert out["INFURA_API_KEY"] == REDACTED
        assert out["event"] == "decoded"

    def test_leaves_other_keys(self) -> None:
        out = redact_secrets(None, "info", {"event": "x", "network_id": 84532})
        assert out == {"event": "x", "network_id": 84532}

    def test_empty_values_untouched(self) -> None:
        out = redact_secrets(None, "info", {"event": "x", "private_key": None})
        assert out["private_key"] is None


class TestSetupLogging:
    def teardown_method(self) -> None:
        structlog.reset_defaults()

    def test_json_renderer_selected(self) -> None:
        setup_logging(json_output=True, log_level="debug")
        processors = structlog.get_config()["processors"]
        assert redact_secrets in processors
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_selected(self) -> None:
        setup_logging(json_output=False, log_level="INFO")
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
