from __future__ import annotations

from bitly_gateway.tools.builtins.account import GetBalanceTool, GetMyOpenOrdersTool
from bitly_gateway.tools.builtins.configure import ConfigureFromUrlTool
from bitly_gateway.tools.builtins.history import GetFinishedOrdersTool, GetMarketOrderHistoryTool
from bitly_gateway.tools.builtins.market import (
    GetOrderbookTool,
    GetTokensInfoTool,
    GetTradePairsInfoTool,
    GetTradeVolumesTool,
)
from bitly_gateway.tools.builtins.prices import GetKlinesTool, GetPricesTool
from bitly_gateway.tools.builtins.trading import (
    CancelAllLimitOrderTool,
    CancelLimitOrderTool,
    ClaimAllEarningsTool,
    ClaimEarningTool,
    PlaceLimitOrderTool,
    PlaceMarketOrderTool,
)
from bitly_gateway.tools.registry import ToolRegistry

BUILTIN_TOOLS = (
    GetBalanceTool,
    GetTradePairsInfoTool,
    GetTokensInfoTool,
    GetTradeVolumesTool,
    GetOrderbookTool,
    GetMyOpenOrdersTool,
    PlaceLimitOrderTool,
    PlaceMarketOrderTool,
    CancelLimitOrderTool,
    CancelAllLimitOrderTool,
    ClaimEarningTool,
    ClaimAllEarningsTool,
    GetFinishedOrdersTool,
    GetMarketOrderHistoryTool,
    GetPricesTool,
    GetKlinesTool,
    ConfigureFromUrlTool,
)


def register_builtins(registry: ToolRegistry) -> None:
    """Register the full tool catalogue with the registry."""
    for tool_cls in BUILTIN_TOOLS:
        registry.register(tool_cls())
