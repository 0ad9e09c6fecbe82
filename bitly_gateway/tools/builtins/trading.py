"""Transaction-submitting tools.

Each one waits for settlement (block time + margin) after the delegate call
returns and then refreshes the pair's candle data; see SettlingTool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.tools.base import SettlingTool
from bitly_gateway.tools.params import LimitOrderParams, MarketOrderParams, PairParams, PointParams

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient

_TX_RETURNS = "Returns the submitted transaction object (hash, from, to, gas fields)."


class PlaceLimitOrderTool(SettlingTool):
    @property
    def name(self) -> str:
        return "place_limit_order"

    @property
    def description(self) -> str:
        return (
            "Submits a new limit order. Requires network ID, pair ID, direction (BUY/SELL), "
            "price, and volume (in base token X if SELL, in quote token Y if BUY). "
            + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[LimitOrderParams]:
        return LimitOrderParams

    async def invoke(self, client: ExchangeClient, params: LimitOrderParams) -> Any:
        return await client.place_limit_order(
            params.pair_id, params.direction, params.price, params.volume,
        )


class PlaceMarketOrderTool(SettlingTool):
    @property
    def name(self) -> str:
        return "place_market_order"

    @property
    def description(self) -> str:
        return (
            "Executes an immediate market order at the best available price. Requires network "
            "ID, pair ID, direction (BUY/SELL), volume (in base token X if SELL, in quote token "
            "Y if BUY), current price estimate, and maximum slippage in basis points (500 means "
            "5%). " + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[MarketOrderParams]:
        return MarketOrderParams

    async def invoke(self, client: ExchangeClient, params: MarketOrderParams) -> Any:
        return await client.place_market_order(
            params.pair_id, params.direction, params.volume, params.cur_price, params.slippage,
        )


class CancelLimitOrderTool(SettlingTool):
    @property
    def name(self) -> str:
        return "cancel_limit_order"

    @property
    def description(self) -> str:
        return (
            "Cancels one open limit order identified by market, direction and price point. "
            "Requires network ID, pair ID, direction (BUY/SELL), and exact price point. "
            + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[PointParams]:
        return PointParams

    async def invoke(self, client: ExchangeClient, params: PointParams) -> Any:
        return await client.cancel_limit_order(params.pair_id, params.direction, params.point)


class CancelAllLimitOrderTool(SettlingTool):
    @property
    def name(self) -> str:
        return "cancel_all_limit_order"

    @property
    def description(self) -> str:
        return (
            "Cancels all open limit orders of the authenticated wallet in one market. "
            "Requires network ID and pair ID. " + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[PairParams]:
        return PairParams

    async def invoke(self, client: ExchangeClient, params: PairParams) -> Any:
        return await client.cancel_all_limit_order(params.pair_id)


class ClaimEarningTool(SettlingTool):
    @property
    def name(self) -> str:
        return "claim_earning"

    @property
    def description(self) -> str:
        return (
            "Claims earnings of one filled limit order. Requires network ID, pair ID, direction "
            "(BUY/SELL), and exact price point. " + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[PointParams]:
        return PointParams

    async def invoke(self, client: ExchangeClient, params: PointParams) -> Any:
        return await client.claim_earning(params.pair_id, params.direction, params.point)


class ClaimAllEarningsTool(SettlingTool):
    @property
    def name(self) -> str:
        return "claim_all_earnings"

    @property
    def description(self) -> str:
        return (
            "Claims all available earnings of the authenticated wallet in one market. "
            "Requires network ID and pair ID. " + _TX_RETURNS
        )

    @property
    def params_model(self) -> type[PairParams]:
        return PairParams

    async def invoke(self, client: ExchangeClient, params: PairParams) -> Any:
        return await client.claim_all_earnings(params.pair_id)
