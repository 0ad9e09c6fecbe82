"""Argument models, one per tool.

Field names are camelCase on the wire (networkId, pairIds, ...) and
snake_case in Python. Unknown keys are rejected.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from bitly_gateway.exchange.client import Direction, KlineResolution


class ToolParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )


class NetworkParams(ToolParams):
    network_id: StrictInt = Field(description="Network ID (chain ID), e.g. 84532 for Base Sepolia.")


class BalanceParams(NetworkParams):
    token_address: str = Field(min_length=1, description="ERC20 token contract address.")


class PairsParams(NetworkParams):
    pair_ids: list[str] = Field(description="Pair IDs; empty list means all pairs.")


class TokensParams(NetworkParams):
    tokens_address: list[str] = Field(description="Token addresses; empty list means all tokens.")


class VolumesParams(PairsParams):
    relative_time_in_sec: int = Field(ge=0, description="Window length in seconds back from now.")


class OrderbookParams(NetworkParams):
    pair_id: str = Field(min_length=1)
    price_range_low: float = Field(ge=0)
    price_range_high: float = Field(ge=0)


class PairParams(NetworkParams):
    pair_id: str = Field(min_length=1)


class LimitOrderParams(PairParams):
    direction: Direction
    price: float = Field(gt=0)
    volume: float = Field(
        gt=0, description="In base token (X) if SELL, in quote token (Y) if BUY."
    )


class MarketOrderParams(PairParams):
    direction: Direction
    volume: float = Field(
        gt=0, description="In base token (X) if SELL, in quote token (Y) if BUY."
    )
    cur_price: float = Field(gt=0, description="Current price estimate.")
    slippage: float = Field(ge=0, description="Max slippage in basis points (500 = 5%).")


class PointParams(PairParams):
    direction: Direction
    point: int = Field(description="Exact price point of the order.")


class HistoryParams(PairsParams):
    relative_from_in_sec: int = Field(ge=0, description="Window start, seconds before now.")
    relative_to_in_sec: int = Field(ge=0, description="Window end, seconds before now.")


class PricesParams(PairsParams):
    relative_time_in_sec: int = Field(ge=0, description="Seconds before now.")


class KlinesParams(HistoryParams):
    resolution: KlineResolution


class ConfigureParams(ToolParams):
    url: str = Field(description="The full URL containing the base64 encoded config parameter")
