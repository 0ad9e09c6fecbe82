from __future__ import annotations

import structlog

from bitly_gateway.tools.base import BaseTool, RiskLevel

logger = structlog.get_logger()


class ToolRegistry:
    """Static tool catalogue. Declared once at startup, looked up by name at dispatch."""

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool. Raises ValueError if name already registered."""
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool
        logger.debug(
            "tool_registered",
            tool_name=tool.name,
            group=tool.group.value,
            risk_level=tool.risk_level.value,
        )

    def get(self, name: str) -> BaseTool | None:
        """Get a tool by name. Returns None if not found."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def get_tools_schema(self) -> list[dict]:
        """Return tools in MCP tools/list format.

        Output format:
        [{"name": ..., "description": ..., "inputSchema": ...,
          "annotations": {"readOnlyHint": ...}, "_meta": {"group": ..., "riskLevel": ...}}]
        """
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.parameters,
                "annotations": {"readOnlyHint": tool.risk_level is RiskLevel.low},
                "_meta": {"group": tool.group.value, "riskLevel": tool.risk_level.value},
            }
            for tool in self._tools.values()
        ]
