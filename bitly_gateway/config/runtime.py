"""Runtime configuration decoding.

A configuration source is a URL whose ``config`` query parameter holds
base64-encoded UTF-8 JSON: ``{"walletCredential": ..., "rpcApiKey": ...}``.
The upper-case keys ``WALLET_PRIVATE_KEY`` / ``INFURA_API_KEY`` are accepted
as well, since existing clients still encode them.

decode_config() has no side effects. Each decoding step raises its own
ConfigDecodeError subclass; callers that hold state must leave it untouched
on failure (see ConfigStore.reconfigure).
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from bitly_gateway.constants import CONFIG_QUERY_PARAM
from bitly_gateway.infra.errors import (
    IncompleteConfigError,
    InvalidEncodingError,
    InvalidJSONError,
    MalformedSourceError,
    MissingConfigParameterError,
)

_CREDENTIAL_KEYS = ("walletCredential", "WALLET_PRIVATE_KEY", "wallet_credential")
_RPC_KEY_KEYS = ("rpcApiKey", "INFURA_API_KEY", "rpc_api_key")


class RuntimeConfig(BaseModel):
    """Validated wallet credential and RPC API key. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    wallet_credential: SecretStr
    rpc_api_key: str

    @field_validator("wallet_credential")
    @classmethod
    def _credential_not_empty(cls, v: SecretStr) -> SecretStr:
        value = v.get_secret_value().strip()
        if not value:
            raise ValueError("wallet_credential must be non-empty")
        return SecretStr(value)

    @field_validator("rpc_api_key")
    @classmethod
    def _rpc_key_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("rpc_api_key must be non-empty")
        return v


def decode_config(source: str, *, param: str = CONFIG_QUERY_PARAM) -> RuntimeConfig:
    """Decode and validate a configuration source URL.

    Raises MalformedSourceError, MissingConfigParameterError,
    InvalidEncodingError, InvalidJSONError or IncompleteConfigError.
    """
    raw_param = _extract_param(source, param)
    decoded = _decode_base64(raw_param)
    data = _parse_json(decoded)
    return _validate(data)


def encode_config_source(base_url: str, payload: dict[str, Any], *, param: str = CONFIG_QUERY_PARAM) -> str:
    """Build a configuration source URL from a plain dict (inverse of decode_config)."""
    encoded = base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")
    parts = urlsplit(base_url)
    query = parts.query + "&" if parts.query else ""
    query += urlencode({param: encoded})
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _extract_param(source: str, param: str) -> str:
    if not isinstance(source, str) or not source.strip():
        raise MalformedSourceError()
    try:
        parts = urlsplit(source.strip())
    except ValueError as e:
        raise MalformedSourceError(f"Configuration source is not a valid URL: {e}") from e
    if not parts.scheme or not parts.netloc:
        raise MalformedSourceError("Configuration source must be an absolute URL")

    values = parse_qs(parts.query, keep_blank_values=True).get(param)
    if not values or not values[0].strip():
        raise MissingConfigParameterError(f"Query parameter '{param}' is missing or empty")
    return values[0].strip()


def _decode_base64(value: str) -> str:
    # Query parsing turns a literal '+' into a space; restore it before decoding.
    normalized = value.replace(" ", "+").replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        raw = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError(f"Configuration parameter is not valid base64: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidEncodingError("Decoded configuration is not valid UTF-8") from e


def _parse_json(text: str) -> dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidJSONError(f"Decoded configuration is not valid JSON: {e.msg}") from e
    if not isinstance(data, dict):
        raise InvalidJSONError(
            f"Decoded configuration must be a JSON object (got {type(data).__name__})"
        )
    return data


def _pick(data: dict[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _validate(data: dict[str, Any]) -> RuntimeConfig:
    credential = _pick(data, _CREDENTIAL_KEYS)
    rpc_api_key = _pick(data, _RPC_KEY_KEYS)

    missing = []
    if credential is None:
        missing.append("walletCredential")
    if rpc_api_key is None:
        missing.append("rpcApiKey")
    if missing:
        raise IncompleteConfigError(missing)

    return RuntimeConfig(wallet_credential=SecretStr(credential), rpc_api_key=rpc_api_key)
