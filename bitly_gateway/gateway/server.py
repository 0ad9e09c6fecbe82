"""MCP server: the tool catalogue served by FastMCP over streamable HTTP.

tools/list and tools/call are answered from the ToolRegistry. Arguments are
validated by each tool's params model inside dispatch_tool, so the camelCase
schemas clients see are the ones calls are checked against.
"""

from __future__ import annotations

from typing import Any

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError as McpToolError
from mcp.types import TextContent, Tool

from bitly_gateway.constants import SERVER_NAME
from bitly_gateway.gateway.dispatch import dispatch_tool
from bitly_gateway.infra.errors import GatewayError
from bitly_gateway.tools.context import ToolContext
from bitly_gateway.tools.registry import ToolRegistry

logger = structlog.get_logger()

INSTRUCTIONS = (
    "Configuration required before trading tools work: call configure_from_url, set "
    "MCP_SERVER_URL, or connect to /mcp?config=<base64-encoded-json> with "
    '{"walletCredential": ..., "rpcApiKey": ...}.'
)


class GatewayMCP(FastMCP):
    """FastMCP server whose tools come from a ToolRegistry.

    Failures are returned as tool results with isError set: gateway errors
    as "<CODE>: <message>", exchange client errors verbatim.
    """

    def __init__(self, registry: ToolRegistry, context: ToolContext, **settings: Any) -> None:
        # FastMCP binds list_tools/call_tool while initializing
        self.tool_registry = registry
        self.tool_context = context
        super().__init__(name=SERVER_NAME, instructions=INSTRUCTIONS, **settings)

    async def list_tools(self) -> list[Tool]:
        return [Tool.model_validate(entry) for entry in self.tool_registry.get_tools_schema()]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        try:
            text = await dispatch_tool(
                registry=self.tool_registry,
                context=self.tool_context,
                name=name,
                arguments=arguments,
            )
        except GatewayError as e:
            logger.warning("tool_call_rejected", tool_name=name, code=e.code, error=str(e))
            raise McpToolError(f"{e.code}: {e}") from e
        except Exception as e:
            # Exchange client failures are reported verbatim, not retried.
            logger.warning("tool_call_failed", tool_name=name, error=str(e), exc_info=True)
            raise McpToolError(str(e) or type(e).__name__) from e

        return [TextContent(type="text", text=text)]
