from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bitly_gateway.constants import DEFAULT_BLOCK_TIME_MS, SETTLEMENT_MARGIN_MS

# Load .env once at module import; all BaseSettings subclasses see the env vars
load_dotenv()


class GatewaySettings(BaseSettings):
    """HTTP transport settings. Env vars prefixed with GATEWAY_."""

    model_config = SettingsConfigDict(env_prefix="GATEWAY_")

    host: str = "0.0.0.0"
    port: int = Field(8080, gt=0, le=65535)
    endpoint: str = "/mcp"

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, v: str) -> str:
        if not v.startswith("/"):
            msg = f"GATEWAY_ENDPOINT must start with '/' (got '{v}')"
            raise ValueError(msg)
        return v.rstrip("/") or "/"


class StartupSettings(BaseSettings):
    """Startup configuration source. Env vars prefixed with MCP_.

    server_url carries the same ?config=<base64> parameter accepted by the
    configure_from_url tool; it is consumed once at process start.
    """

    model_config = SettingsConfigDict(env_prefix="MCP_")

    server_url: str | None = None


class ExchangeSettings(BaseSettings):
    """Exchange client and settlement settings. Env vars prefixed with EXCHANGE_."""

    model_config = SettingsConfigDict(env_prefix="EXCHANGE_")

    client: str = "paper"
    settlement_margin_ms: int = Field(SETTLEMENT_MARGIN_MS, ge=0)
    default_block_time_ms: int = Field(DEFAULT_BLOCK_TIME_MS, gt=0)

    @field_validator("client")
    @classmethod
    def _validate_client(cls, v: str) -> str:
        allowed = {"paper"}
        v = v.strip().lower()
        if v not in allowed:
            msg = f"EXCHANGE_CLIENT must be one of {allowed} (got '{v}')"
            raise ValueError(msg)
        return v


class LoggingSettings(BaseSettings):
    """Logging settings. Env vars prefixed with LOG_."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    json_output: bool = False
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v = v.strip().upper()
        if v not in allowed:
            msg = f"LOG_LEVEL must be one of {sorted(allowed)} (got '{v}')"
            raise ValueError(msg)
        return v


class Settings(BaseSettings):
    """Root settings composing all sub-configurations."""

    model_config = SettingsConfigDict(extra="ignore")

    gateway: GatewaySettings = Field(default_factory=GatewaySettings)
    startup: StartupSettings = Field(default_factory=StartupSettings)
    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def get_settings() -> Settings:
    """Load and validate settings. Raises ValidationError on invalid values."""
    return Settings()
