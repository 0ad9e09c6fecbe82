from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.tools.base import SessionTool, ToolGroup
from bitly_gateway.tools.params import HistoryParams

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient


class GetFinishedOrdersTool(SessionTool):
    """Filled or cancelled orders of the authenticated wallet."""

    @property
    def name(self) -> str:
        return "get_finished_orders"

    @property
    def description(self) -> str:
        return (
            "Retrieves filled/cancelled orders of the authenticated wallet within a time range. "
            "Requires network ID, array of pair IDs, and from/to offsets in seconds relative to "
            "now. Returns an object mapping market addresses to orders with direction, volume, "
            "price, timestamp, and transaction hash."
        )

    @property
    def params_model(self) -> type[HistoryParams]:
        return HistoryParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.history

    async def invoke(self, client: ExchangeClient, params: HistoryParams) -> Any:
        return await client.get_finished_orders(
            params.pair_ids, params.relative_from_in_sec, params.relative_to_in_sec,
        )


class GetMarketOrderHistoryTool(SessionTool):
    """Market-wide trade history."""

    @property
    def name(self) -> str:
        return "get_market_order_history"

    @property
    def description(self) -> str:
        return (
            "Fetches trade history for the given markets. Requires network ID, array of pair "
            "IDs, and from/to offsets in seconds relative to now. Returns an object mapping "
            "market addresses to trades with direction, volume, price, timestamp, and "
            "transaction hash."
        )

    @property
    def params_model(self) -> type[HistoryParams]:
        return HistoryParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.history

    async def invoke(self, client: ExchangeClient, params: HistoryParams) -> Any:
        return await client.get_market_order_history(
            params.pair_ids, params.relative_from_in_sec, params.relative_to_in_sec,
        )
