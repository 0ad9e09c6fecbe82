"""Tests for dispatch_tool: lookup, argument validation, execution, serialization."""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import TEST_PRIVATE_KEY, FakeClock, make_source
from eth_account import Account

from bitly_gateway.config.store import ConfigStore
from bitly_gateway.exchange.paper import PaperExchange, PaperLedger
from bitly_gateway.gateway.dispatch import dispatch_tool, serialize_result
from bitly_gateway.infra.errors import (
    InvalidParamsError,
    NotConfiguredError,
    ToolNotFoundError,
    UnauthorizedError,
    UnknownNetworkError,
)
from bitly_gateway.session.factory import SessionFactory
from bitly_gateway.tools.builtins import register_builtins
from bitly_gateway.tools.context import ToolContext
from bitly_gateway.tools.params import ToolParams
from bitly_gateway.tools.registry import ToolRegistry

_PAIRS = {"networkId": 84532, "pairIds": ["WETH-USDC"]}
_WINDOW = {**_PAIRS, "relativeFromInSec": 3600, "relativeToInSec": 0}

VALID_ARGS = {
    "get_balance": {"networkId": 84532, "tokenAddress": "0xTOKEN"},
    "get_trade_pairs_info": _PAIRS,
    "get_tokens_info": {"networkId": 84532, "tokensAddress": []},
    "get_trade_volumes": {**_PAIRS, "relativeTimeInSec": 3600},
    "get_orderbook": {
        "networkId": 84532, "pairId": "WETH-USDC", "priceRangeLow": 0, "priceRangeHigh": 5000,
    },
    "get_my_open_orders": _PAIRS,
    "place_limit_order": {
        "networkId": 84532, "pairId": "WETH-USDC", "direction": "BUY", "price": 1900, "volume": 100,
    },
    "place_market_order": {
        "networkId": 84532, "pairId": "WETH-USDC", "direction": "BUY", "volume": 100,
        "curPrice": 2000, "slippage": 500,
    },
    "cancel_limit_order": {"networkId": 84532, "pairId": "WETH-USDC", "direction": "BUY", "point": 1},
    "cancel_all_limit_order": {"networkId": 84532, "pairId": "WETH-USDC"},
    "claim_earning": {"networkId": 84532, "pairId": "WETH-USDC", "direction": "SELL", "point": 1},
    "claim_all_earnings": {"networkId": 84532, "pairId": "WETH-USDC"},
    "get_finished_orders": _WINDOW,
    "get_market_order_history": _WINDOW,
    "get_prices": {**_PAIRS, "relativeTimeInSec": 0},
    "get_klines": {**_WINDOW, "resolution": "60"},
}


def _registry() -> ToolRegistry:
    registry = ToolRegistry()
    register_builtins(registry)
    return registry


def _paper_context(store: ConfigStore, clock: FakeClock) -> ToolContext:
    ledger = PaperLedger(clock)
    factory = SessionFactory(store, lambda nid, conn: PaperExchange(ledger, nid, conn))
    return ToolContext(store=store, session_factory=factory, sleep=clock.sleep)


class TestSerializeResult:
    def test_string_passthrough(self) -> None:
        assert serialize_result("done") == "done"

    def test_compact_json(self) -> None:
        assert serialize_result({"a": [1, 2]}) == '{"a":[1,2]}'

    def test_decimal_and_bytes(self) -> None:
        assert json.loads(serialize_result({"d": Decimal("1.50"), "b": b"\x01\x02"})) == {
            "d": "1.50",
            "b": "0x0102",
        }

    def test_dataclass(self) -> None:
        @dataclass
        class Point:
            x: int

        assert serialize_result([Point(1)]) == '[{"x":1}]'

    def test_pydantic_model_by_alias(self) -> None:
        class Sample(ToolParams):
            network_id: int

        assert serialize_result(Sample(network_id=1)) == '{"networkId":1}'

    def test_unserializable_raises(self) -> None:
        with pytest.raises(TypeError):
            serialize_result({"x": object()})


class TestDispatchRejections:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, store: ConfigStore) -> None:
        context = ToolContext(store=store, session_factory=MagicMock())
        with pytest.raises(ToolNotFoundError, match="Unknown tool: nope"):
            await dispatch_tool(registry=_registry(), context=context, name="nope", arguments={})

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"networkId": "84532", "tokenAddress": "0xT"},
            {"networkId": True, "tokenAddress": "0xT"},
            {"networkId": 84532.0, "tokenAddress": "0xT"},
            {"networkId": 84532},
            {"networkId": 84532, "tokenAddress": ""},
            {"networkId": 84532, "tokenAddress": "0xT", "extra": 1},
        ],
    )
    async def test_invalid_arguments_rejected_before_session(
        self, store: ConfigStore, arguments: dict
    ) -> None:
        session_factory = MagicMock()
        session_factory.create_session = AsyncMock()
        context = ToolContext(store=store, session_factory=session_factory)

        with pytest.raises(InvalidParamsError, match="Invalid arguments for get_balance"):
            await dispatch_tool(
                registry=_registry(), context=context, name="get_balance", arguments=arguments,
            )
        session_factory.create_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_direction(self, store: ConfigStore) -> None:
        context = ToolContext(store=store, session_factory=MagicMock())
        arguments = {**VALID_ARGS["place_limit_order"], "direction": "HOLD"}
        with pytest.raises(InvalidParamsError, match="direction"):
            await dispatch_tool(
                registry=_registry(), context=context, name="place_limit_order", arguments=arguments,
            )

    @pytest.mark.asyncio
    async def test_invalid_resolution(self, store: ConfigStore) -> None:
        context = ToolContext(store=store, session_factory=MagicMock())
        arguments = {**VALID_ARGS["get_klines"], "resolution": "5"}
        with pytest.raises(InvalidParamsError):
            await dispatch_tool(
                registry=_registry(), context=context, name="get_klines", arguments=arguments,
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(VALID_ARGS))
    async def test_every_network_tool_requires_configuration(
        self, store: ConfigStore, fake_clock: FakeClock, name: str
    ) -> None:
        context = _paper_context(store, fake_clock)
        with pytest.raises(NotConfiguredError):
            await dispatch_tool(
                registry=_registry(), context=context, name=name, arguments=VALID_ARGS[name],
            )
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_unknown_network(self, store: ConfigStore, fake_clock: FakeClock) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        arguments = {"networkId": 1, "tokenAddress": "0xTOKEN"}
        with pytest.raises(UnknownNetworkError):
            await dispatch_tool(
                registry=_registry(), context=context, name="get_balance", arguments=arguments,
            )

    @pytest.mark.asyncio
    async def test_unauthorized(self, store: ConfigStore, fake_clock: FakeClock) -> None:
        await store.reconfigure(make_source(credential="0xabc"))
        context = _paper_context(store, fake_clock)
        with pytest.raises(UnauthorizedError):
            await dispatch_tool(
                registry=_registry(), context=context, name="get_balance",
                arguments=VALID_ARGS["get_balance"],
            )


class TestDispatchEndToEnd:
    @pytest.mark.asyncio
    async def test_get_balance(self, store: ConfigStore, fake_clock: FakeClock) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)

        text = await dispatch_tool(
            registry=_registry(), context=context, name="get_balance",
            arguments=VALID_ARGS["get_balance"],
        )

        assert json.loads(text) == {"0xTOKEN": "0"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(VALID_ARGS))
    async def test_every_tool_runs_once_configured(
        self, store: ConfigStore, fake_clock: FakeClock, name: str
    ) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        registry = _registry()
        if name in {"cancel_limit_order"}:
            await dispatch_tool(
                registry=registry, context=context, name="place_limit_order",
                arguments={**VALID_ARGS["place_limit_order"], "price": 1.0001},
            )

        text = await dispatch_tool(
            registry=registry, context=context, name=name, arguments=VALID_ARGS[name],
        )

        assert isinstance(json.loads(text), (dict, list))

    @pytest.mark.asyncio
    async def test_limit_order_settles_before_returning(
        self, store: ConfigStore, fake_clock: FakeClock
    ) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        registry = _registry()

        tx = json.loads(await dispatch_tool(
            registry=registry, context=context, name="place_limit_order",
            arguments=VALID_ARGS["place_limit_order"],
        ))

        assert fake_clock.sleeps == [3.0]
        assert tx["from"] == Account.from_key(TEST_PRIVATE_KEY).address
        assert tx["type"] == 0
        assert tx["maxFeePerGas"] is None
        assert tx["gasPrice"] == "1000000000"

        orders = json.loads(await dispatch_tool(
            registry=registry, context=context, name="get_my_open_orders",
            arguments=VALID_ARGS["get_my_open_orders"],
        ))
        (market_orders,) = orders.values()
        assert len(market_orders) == 1
        assert market_orders[0]["direction"] == "BUY"

    @pytest.mark.asyncio
    async def test_market_order_refreshes_klines(
        self, store: ConfigStore, fake_clock: FakeClock
    ) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        registry = _registry()

        await dispatch_tool(
            registry=registry, context=context, name="place_market_order",
            arguments=VALID_ARGS["place_market_order"],
        )
        candles = json.loads(await dispatch_tool(
            registry=registry, context=context, name="get_klines",
            arguments=VALID_ARGS["get_klines"],
        ))

        assert len(candles) == 1
        assert candles[0]["volume"] == 100.0

    @pytest.mark.asyncio
    async def test_delegate_error_propagates_verbatim(
        self, store: ConfigStore, fake_clock: FakeClock
    ) -> None:
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        arguments = {**VALID_ARGS["get_trade_pairs_info"], "pairIds": ["DOGE-USDC"]}

        with pytest.raises(ValueError, match="Unknown pair: DOGE-USDC"):
            await dispatch_tool(
                registry=_registry(), context=context, name="get_trade_pairs_info",
                arguments=arguments,
            )

    @pytest.mark.asyncio
    async def test_reconfigure_between_calls_uses_new_credential(
        self, store: ConfigStore, fake_clock: FakeClock
    ) -> None:
        other_key = "0x" + "22" * 32
        await store.reconfigure(make_source())
        context = _paper_context(store, fake_clock)
        registry = _registry()

        await dispatch_tool(
            registry=registry, context=context, name="configure_from_url",
            arguments={"url": make_source(credential=other_key)},
        )
        tx = json.loads(await dispatch_tool(
            registry=registry, context=context, name="cancel_all_limit_order",
            arguments=VALID_ARGS["cancel_all_limit_order"],
        ))

        assert tx["from"] == Account.from_key(other_key).address
