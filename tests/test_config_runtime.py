"""Tests for runtime config decoding (URL -> base64 -> JSON -> RuntimeConfig)."""

from __future__ import annotations

import base64
import json

import pytest
from conftest import BASE_URL, TEST_PRIVATE_KEY, TEST_RPC_KEY, make_source

from bitly_gateway.config.runtime import RuntimeConfig, decode_config, encode_config_source
from bitly_gateway.infra.errors import (
    ConfigDecodeError,
    IncompleteConfigError,
    InvalidEncodingError,
    InvalidJSONError,
    MalformedSourceError,
    MissingConfigParameterError,
)


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


class TestDecodeConfigSuccess:
    def test_decodes_camel_case_keys(self) -> None:
        config = decode_config(make_source())
        assert config.wallet_credential.get_secret_value() == TEST_PRIVATE_KEY
        assert config.rpc_api_key == TEST_RPC_KEY

    def test_decoding_is_idempotent(self, valid_source: str) -> None:
        assert decode_config(valid_source) == decode_config(valid_source)

    def test_accepts_legacy_upper_case_keys(self) -> None:
        source = encode_config_source(
            BASE_URL, {"WALLET_PRIVATE_KEY": "0xabc", "INFURA_API_KEY": "k1"}
        )
        config = decode_config(source)
        assert config.wallet_credential.get_secret_value() == "0xabc"
        assert config.rpc_api_key == "k1"

    def test_camel_case_wins_over_legacy_key(self) -> None:
        source = encode_config_source(
            BASE_URL,
            {"walletCredential": "new", "WALLET_PRIVATE_KEY": "old", "rpcApiKey": "k"},
        )
        assert decode_config(source).wallet_credential.get_secret_value() == "new"

    def test_extra_fields_ignored(self) -> None:
        config = decode_config(make_source(theme="dark"))
        assert not hasattr(config, "theme")

    def test_unpadded_url_safe_base64(self) -> None:
        payload = json.dumps({"walletCredential": "0xabc?>", "rpcApiKey": "k1"})
        encoded = base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")
        config = decode_config(f"{BASE_URL}?config={encoded}")
        assert config.wallet_credential.get_secret_value() == "0xabc?>"

    def test_plus_decoded_as_space_is_restored(self) -> None:
        # '>>>' encodes to 'Pj4+' so the standard alphabet carries a '+'
        payload = json.dumps({"walletCredential": ">>>", "rpcApiKey": "k1"})
        encoded = _b64(payload)
        assert "+" in encoded
        config = decode_config(f"{BASE_URL}?config={encoded}")
        assert config.wallet_credential.get_secret_value() == ">>>"

    def test_other_query_parameters_kept_apart(self) -> None:
        source = encode_config_source(f"{BASE_URL}?session=1", {"walletCredential": "a", "rpcApiKey": "b"})
        assert decode_config(source).rpc_api_key == "b"

    def test_values_are_stripped(self) -> None:
        config = decode_config(make_source(credential="  0xabc  ", rpc_api_key=" k "))
        assert config.wallet_credential.get_secret_value() == "0xabc"
        assert config.rpc_api_key == "k"

    def test_credential_hidden_in_repr(self) -> None:
        config = decode_config(make_source())
        assert TEST_PRIVATE_KEY not in repr(config)


class TestDecodeConfigErrors:
    @pytest.mark.parametrize("source", ["", "   ", "not a url", "/mcp?config=abc"])
    def test_malformed_source(self, source: str) -> None:
        with pytest.raises(MalformedSourceError):
            decode_config(source)

    def test_non_string_source(self) -> None:
        with pytest.raises(MalformedSourceError):
            decode_config(None)  # type: ignore[arg-type]

    @pytest.mark.parametrize("source", [BASE_URL, f"{BASE_URL}?config=", f"{BASE_URL}?other=1"])
    def test_missing_parameter(self, source: str) -> None:
        with pytest.raises(MissingConfigParameterError):
            decode_config(source)

    def test_invalid_base64(self) -> None:
        with pytest.raises(InvalidEncodingError):
            decode_config(f"{BASE_URL}?config=%%%not-base64%%%")

    def test_invalid_utf8(self) -> None:
        encoded = base64.b64encode(b"\xff\xfe\xfd").decode()
        with pytest.raises(InvalidEncodingError):
            decode_config(f"{BASE_URL}?config={encoded}")

    def test_invalid_json(self) -> None:
        with pytest.raises(InvalidJSONError):
            decode_config(f"{BASE_URL}?config={_b64('{not json')}")

    @pytest.mark.parametrize("payload", ["[1, 2]", '"text"', "42", "null"])
    def test_non_object_json(self, payload: str) -> None:
        with pytest.raises(InvalidJSONError):
            decode_config(f"{BASE_URL}?config={_b64(payload)}")

    def test_missing_credential(self) -> None:
        with pytest.raises(IncompleteConfigError) as exc_info:
            decode_config(make_source(credential=None))
        assert exc_info.value.missing == ["walletCredential"]
        assert exc_info.value.code == "INCOMPLETE_CONFIG"

    def test_empty_rpc_key(self) -> None:
        with pytest.raises(IncompleteConfigError) as exc_info:
            decode_config(make_source(rpc_api_key="   "))
        assert exc_info.value.missing == ["rpcApiKey"]

    def test_both_missing(self) -> None:
        with pytest.raises(IncompleteConfigError) as exc_info:
            decode_config(make_source(credential=None, rpc_api_key=None))
        assert exc_info.value.missing == ["walletCredential", "rpcApiKey"]
        assert "walletCredential, rpcApiKey" in str(exc_info.value)

    def test_non_string_values_count_as_missing(self) -> None:
        source = encode_config_source(BASE_URL, {"walletCredential": 123, "rpcApiKey": "k"})
        with pytest.raises(IncompleteConfigError):
            decode_config(source)

    def test_all_errors_share_base_class(self) -> None:
        for cls in (
            MalformedSourceError,
            MissingConfigParameterError,
            InvalidEncodingError,
            InvalidJSONError,
            IncompleteConfigError,
        ):
            assert issubclass(cls, ConfigDecodeError)


class TestRuntimeConfig:
    def test_frozen(self) -> None:
        config = decode_config(make_source())
        with pytest.raises(Exception):
            config.rpc_api_key = "other"  # type: ignore[misc]

    def test_rejects_empty_values(self) -> None:
        with pytest.raises(ValueError):
            RuntimeConfig(wallet_credential="", rpc_api_key="k")
        with pytest.raises(ValueError):
            RuntimeConfig(wallet_credential="0xabc", rpc_api_key="  ")
