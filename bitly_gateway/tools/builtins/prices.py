from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.tools.base import SessionTool, ToolGroup
from bitly_gateway.tools.params import KlinesParams, PricesParams

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient


class GetPricesTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_prices"

    @property
    def description(self) -> str:
        return (
            "Retrieves current or historical prices for the given trading pairs. Requires "
            "network ID, array of pair IDs, and a time offset in seconds relative to now. "
            "Returns an object mapping market addresses to prices."
        )

    @property
    def params_model(self) -> type[PricesParams]:
        return PricesParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.prices

    async def invoke(self, client: ExchangeClient, params: PricesParams) -> Any:
        return await client.get_prices(params.pair_ids, params.relative_time_in_sec)


class GetKlinesTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_klines"

    @property
    def description(self) -> str:
        return (
            "Fetches OHLCV candle data. Requires network ID, array of pair IDs, candle "
            "resolution (60, 240, 1D), and from/to offsets in seconds relative to now. Returns "
            "candles with open, high, low, close, volume, symbol, and time."
        )

    @property
    def params_model(self) -> type[KlinesParams]:
        return KlinesParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.prices

    async def invoke(self, client: ExchangeClient, params: KlinesParams) -> Any:
        return await client.get_klines(
            params.pair_ids, params.resolution, params.relative_from_in_sec, params.relative_to_in_sec,
        )
