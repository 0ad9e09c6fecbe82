"""Contract of the exchange client the tools delegate to.

The trading logic itself lives behind this protocol; the gateway only binds
a connection and signer to it and invokes one method per tool call.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol


class Direction(StrEnum):
    BUY = "BUY"
    SELL = "SELL"


class KlineResolution(StrEnum):
    one_minute = "60"
    four_minutes = "240"
    one_day = "1D"


@dataclass(frozen=True)
class PriceRange:
    low: float
    high: float


class ExchangeClient(Protocol):
    async def set_signer(self, signer: Any) -> None: ...

    async def set_provider(self, connection: Any) -> None: ...

    # wallet
    async def balances_in_bank(self, token_addresses: list[str]) -> dict[str, str]: ...

    # exchange
    async def get_markets_info(self, pair_ids: list[str]) -> list[dict[str, Any]]: ...

    async def get_tokens_info(self, token_addresses: list[str]) -> list[dict[str, Any]]: ...

    async def get_volumes(self, pair_ids: list[str], relative_time_in_sec: int) -> dict[str, str]: ...

    async def get_orderbook(self, pair_id: str, price_range: PriceRange) -> dict[str, Any]: ...

    async def get_limit_orders(self, pair_ids: list[str]) -> dict[str, list[dict[str, Any]]]: ...

    async def place_limit_order(
        self, pair_id: str, direction: Direction, price: float, volume: float
    ) -> dict[str, Any]: ...

    async def place_market_order(
        self, pair_id: str, direction: Direction, volume: float, cur_price: float, slippage: float
    ) -> dict[str, Any]: ...

    async def cancel_limit_order(self, pair_id: str, direction: Direction, point: int) -> dict[str, Any]: ...

    async def cancel_all_limit_order(self, pair_id: str) -> dict[str, Any]: ...

    async def claim_earning(self, pair_id: str, direction: Direction, point: int) -> dict[str, Any]: ...

    async def claim_all_earnings(self, pair_id: str) -> dict[str, Any]: ...

    async def get_finished_orders(
        self, pair_ids: list[str], relative_from_in_sec: int, relative_to_in_sec: int
    ) -> dict[str, list[dict[str, Any]]]: ...

    async def get_market_order_history(
        self, pair_ids: list[str], relative_from_in_sec: int, relative_to_in_sec: int
    ) -> dict[str, list[dict[str, Any]]]: ...

    # prices
    async def get_prices(self, pair_ids: list[str], relative_time_in_sec: int) -> dict[str, float]: ...

    async def get_klines(
        self,
        pair_ids: list[str],
        resolution: KlineResolution,
        relative_from_in_sec: int,
        relative_to_in_sec: int,
    ) -> list[dict[str, Any]]: ...

    async def update_kline(self, pair_id: str) -> None: ...


# (network_id, connection) -> fresh client bound to that network
ExchangeClientFactory = Callable[[int, Any], ExchangeClient]
