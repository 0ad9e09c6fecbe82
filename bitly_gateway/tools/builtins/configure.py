"""Runtime reconfiguration tool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.tools.base import BaseTool, RiskLevel, ToolGroup
from bitly_gateway.tools.params import ConfigureParams

if TYPE_CHECKING:
    from bitly_gateway.tools.context import ToolContext


class ConfigureFromUrlTool(BaseTool):
    """Decode a config URL and rebuild the network registry.

    Decode and provider failures are raised with their error code; the
    previously held configuration stays in effect.
    """

    @property
    def name(self) -> str:
        return "configure_from_url"

    @property
    def description(self) -> str:
        return (
            "Configures the server from URL parameters. Pass the full URL with a base64 "
            "encoded JSON config parameter: {\"walletCredential\": ..., \"rpcApiKey\": ...}."
        )

    @property
    def params_model(self) -> type[ConfigureParams]:
        return ConfigureParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.admin

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel.high

    async def execute(self, params: ConfigureParams, context: ToolContext) -> Any:
        result = await context.store.reconfigure(params.url)
        if result.error is not None:
            raise result.error
        return {
            "message": result.message,
            "configured": True,
            "networks": result.networks,
        }
