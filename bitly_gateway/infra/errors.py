"""Custom exception hierarchy for the Bitly gateway.

All application-specific exceptions inherit from GatewayError,
which carries an error code the transport maps to protocol responses.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(self, message: str, *, code: str = "INTERNAL_ERROR") -> None:
        super().__init__(message)
        self.code = code


class ConfigDecodeError(GatewayError):
    """Runtime configuration source could not be decoded."""

    def __init__(self, message: str, *, code: str = "CONFIG_DECODE_ERROR") -> None:
        super().__init__(message, code=code)


class MalformedSourceError(ConfigDecodeError):
    def __init__(self, message: str = "Configuration source is not a valid URL") -> None:
        super().__init__(message, code="MALFORMED_SOURCE")


class MissingConfigParameterError(ConfigDecodeError):
    def __init__(self, message: str = "Configuration query parameter is missing") -> None:
        super().__init__(message, code="MISSING_CONFIG_PARAMETER")


class InvalidEncodingError(ConfigDecodeError):
    def __init__(self, message: str = "Configuration parameter is not valid base64") -> None:
        super().__init__(message, code="INVALID_ENCODING")


class InvalidJSONError(ConfigDecodeError):
    def __init__(self, message: str = "Decoded configuration is not valid JSON") -> None:
        super().__init__(message, code="INVALID_JSON")


class IncompleteConfigError(ConfigDecodeError):
    """Required configuration fields are absent or empty."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(
            f"Missing required config fields: {', '.join(missing)}",
            code="INCOMPLETE_CONFIG",
        )
        self.missing = missing


class ProviderInitError(GatewayError):
    """Network registry could not be built from the configuration."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="PROVIDER_INIT_ERROR")


class SessionError(GatewayError):
    """Errors while creating a per-invocation exchange session."""

    def __init__(self, message: str, *, code: str = "SESSION_ERROR") -> None:
        super().__init__(message, code=code)


class NotConfiguredError(SessionError):
    def __init__(
        self,
        message: str = (
            "Configuration not provided. Use the configure_from_url tool, set "
            "MCP_SERVER_URL, or connect with a base64 encoded ?config= parameter."
        ),
    ) -> None:
        super().__init__(message, code="NOT_CONFIGURED")


class UnknownNetworkError(SessionError):
    def __init__(self, network_id: int, available: list[int] | None = None) -> None:
        message = f"Provider not available for network {network_id}."
        if available:
            message += f" Configured networks: {available}"
        super().__init__(message, code="UNKNOWN_NETWORK")
        self.network_id = network_id


class UnauthorizedError(SessionError):
    """Wallet credential could not produce a signer.

    Kept distinct from generic errors so callers can detect credential
    problems; the transport maps it to an unauthorized response.
    """

    def __init__(self, cause: str) -> None:
        super().__init__(f"Unauthorized - {cause}", code="UNAUTHORIZED")
        self.cause = cause


class ToolError(GatewayError):
    """Errors resolving or validating a tool call."""

    def __init__(self, message: str, *, code: str = "TOOL_ERROR") -> None:
        super().__init__(message, code=code)


class ToolNotFoundError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", code="TOOL_NOT_FOUND")
        self.name = name


class InvalidParamsError(ToolError):
    def __init__(self, message: str) -> None:
        super().__init__(message, code="INVALID_PARAMS")
