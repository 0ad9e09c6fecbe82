"""Market metadata and order book queries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.exchange.client import PriceRange
from bitly_gateway.tools.base import SessionTool
from bitly_gateway.tools.params import OrderbookParams, PairsParams, TokensParams, VolumesParams

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient


class GetTradePairsInfoTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_trade_pairs_info"

    @property
    def description(self) -> str:
        return (
            "Fetches trading pair information including market addresses, display names, and "
            "base/quote token details. Requires network ID and array of pair IDs. Returns an "
            "array of objects with marketAddress, displayName, tokenX and tokenY. Leave pairIds "
            "empty to get all pairs."
        )

    @property
    def params_model(self) -> type[PairsParams]:
        return PairsParams

    async def invoke(self, client: ExchangeClient, params: PairsParams) -> Any:
        return await client.get_markets_info(params.pair_ids)


class GetTokensInfoTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_tokens_info"

    @property
    def description(self) -> str:
        return (
            "Retrieves metadata for the given ERC20 tokens. Requires network ID and array of "
            "token contract addresses. Returns an array of objects with symbol, name, decimals "
            "and address. Leave tokensAddress empty to get all tokens."
        )

    @property
    def params_model(self) -> type[TokensParams]:
        return TokensParams

    async def invoke(self, client: ExchangeClient, params: TokensParams) -> Any:
        return await client.get_tokens_info(params.tokens_address)


class GetTradeVolumesTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_trade_volumes"

    @property
    def description(self) -> str:
        return (
            "Calculates trading volumes for the given pairs over a time window. Requires network "
            "ID, array of pair IDs, and relative time window in seconds. Returns an object "
            "mapping market addresses to real (human-readable) volume amounts."
        )

    @property
    def params_model(self) -> type[VolumesParams]:
        return VolumesParams

    async def invoke(self, client: ExchangeClient, params: VolumesParams) -> Any:
        return await client.get_volumes(params.pair_ids, params.relative_time_in_sec)


class GetOrderbookTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_orderbook"

    @property
    def description(self) -> str:
        return (
            "Retrieves the order book for a trading pair within a price range. Requires network "
            "ID, pair ID, and price range (low/high). Returns an object with asks and bids, each "
            "entry holding direction, price and amount."
        )

    @property
    def params_model(self) -> type[OrderbookParams]:
        return OrderbookParams

    async def invoke(self, client: ExchangeClient, params: OrderbookParams) -> Any:
        price_range = PriceRange(low=params.price_range_low, high=params.price_range_high)
        return await client.get_orderbook(params.pair_id, price_range)
