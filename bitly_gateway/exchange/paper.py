"""Deterministic in-memory exchange client.

PaperExchange implements the ExchangeClient contract against a shared
PaperLedger. State-changing calls are recorded as pending transactions that
settle one block interval later on the ledger clock; reads only see settled
state, which mirrors how an on-chain exchange behaves between submission and
mining.
"""

from __future__ import annotations

import hashlib
import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import structlog
from web3 import Web3

from bitly_gateway.exchange.client import Direction, KlineResolution, PriceRange
from bitly_gateway.network.descriptors import block_interval_ms

logger = structlog.get_logger()

_TICK_BASE = 1.0001
_RESOLUTION_SECONDS = {
    KlineResolution.one_minute: 60,
    KlineResolution.four_minutes: 240,
    KlineResolution.one_day: 86_400,
}


@dataclass(frozen=True)
class PaperToken:
    symbol: str
    name: str
    decimals: int
    address: str

    def info(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "decimals": self.decimals,
            "address": self.address,
        }


@dataclass
class PaperMarket:
    pair_id: str
    market_address: str
    token_x: PaperToken
    token_y: PaperToken
    price: float

    def info(self) -> dict[str, Any]:
        return {
            "marketAddress": self.market_address,
            "displayName": self.pair_id,
            "tokenX": self.token_x.info(),
            "tokenY": self.token_y.info(),
        }


@dataclass
class PaperOrder:
    owner: str
    pair_id: str
    direction: Direction
    price: float
    point: int
    selling: Decimal
    placed_at: float
    settles_at: float
    sold: Decimal = Decimal(0)
    earned: Decimal = Decimal(0)
    closed_at: float | None = None
    tx_hash: str = ""

    def is_open(self, now: float) -> bool:
        return self.settles_at <= now and (self.closed_at is None or self.closed_at > now)

    def detail(self) -> dict[str, Any]:
        return {
            "sold": float(self.sold),
            "earned": float(self.earned),
            "selling": float(self.selling),
            "price": self.price,
            "direction": self.direction.value,
            "point": self.point,
        }


@dataclass
class PaperTrade:
    owner: str
    pair_id: str
    direction: Direction
    volume: float
    price: float
    timestamp: float
    tx_hash: str

    def detail(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "volume": self.volume,
            "price": self.price,
            "timestamp": int(self.timestamp * 1000),
            "transactionHash": self.tx_hash,
        }


@dataclass
class _NetworkBook:
    markets: dict[str, PaperMarket]
    balances: dict[tuple[str, str], Decimal] = field(default_factory=dict)
    orders: list[PaperOrder] = field(default_factory=list)
    trades: list[PaperTrade] = field(default_factory=list)
    # pair_id -> list of (bucket_start, open, high, low, close, volume)
    candles: dict[str, list[list[float]]] = field(default_factory=dict)
    nonces: dict[str, int] = field(default_factory=dict)


def _address(label: str) -> str:
    return "0x" + hashlib.sha256(label.encode("utf-8")).hexdigest()[:40]


def price_to_point(price: float) -> int:
    return round(math.log(price) / math.log(_TICK_BASE))


def _seed_markets(network_id: int) -> dict[str, PaperMarket]:
    usdc = PaperToken("USDC", "USD Coin", 6, _address(f"{network_id}:USDC"))
    weth = PaperToken("WETH", "Wrapped Ether", 18, _address(f"{network_id}:WETH"))
    wbtc = PaperToken("WBTC", "Wrapped Bitcoin", 8, _address(f"{network_id}:WBTC"))
    markets = [
        PaperMarket("WETH-USDC", _address(f"{network_id}:WETH-USDC"), weth, usdc, 2000.0),
        PaperMarket("WBTC-USDC", _address(f"{network_id}:WBTC-USDC"), wbtc, usdc, 60000.0),
    ]
    return {m.pair_id: m for m in markets}


class PaperLedger:
    """Shared exchange state, one book per network.

    Every owner starts with initial_balance of each listed token.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        *,
        initial_balance: Decimal = Decimal(10_000),
    ) -> None:
        self.clock = clock
        self.initial_balance = initial_balance
        self._books: dict[int, _NetworkBook] = {}

    def book(self, network_id: int) -> _NetworkBook:
        if network_id not in self._books:
            self._books[network_id] = _NetworkBook(markets=_seed_markets(network_id))
        return self._books[network_id]

    def tokens(self, network_id: int) -> dict[str, PaperToken]:
        tokens: dict[str, PaperToken] = {}
        for market in self.book(network_id).markets.values():
            for token in (market.token_x, market.token_y):
                tokens[token.address.lower()] = token
        return tokens

    def balance(self, network_id: int, owner: str, token_address: str) -> Decimal:
        book = self.book(network_id)
        key = (owner.lower(), token_address.lower())
        if key not in book.balances:
            listed = token_address.lower() in self.tokens(network_id)
            book.balances[key] = self.initial_balance if listed else Decimal(0)
        return book.balances[key]

    def adjust(self, network_id: int, owner: str, token_address: str, delta: Decimal) -> None:
        current = self.balance(network_id, owner, token_address)
        if current + delta < 0:
            raise ValueError(
                f"Insufficient balance for {token_address}: have {current}, need {-delta}"
            )
        self.book(network_id).balances[(owner.lower(), token_address.lower())] = current + delta


class PaperExchange:
    """ExchangeClient backed by a PaperLedger."""

    def __init__(self, ledger: PaperLedger, network_id: int, connection: Any) -> None:
        self._ledger = ledger
        self.network_id = network_id
        self.connection = connection
        self.signer: Any = None

    async def set_signer(self, signer: Any) -> None:
        self.signer = signer

    async def set_provider(self, connection: Any) -> None:
        self.connection = connection

    # -- helpers ---------------------------------------------------------

    @property
    def _book(self) -> _NetworkBook:
        return self._ledger.book(self.network_id)

    def _owner(self) -> str:
        if self.signer is None:
            raise RuntimeError("signer not set")
        return self.signer.address

    def _market(self, pair_id: str) -> PaperMarket:
        market = self._book.markets.get(pair_id)
        if market is None:
            raise ValueError(f"Unknown pair: {pair_id}")
        return market

    def _markets(self, pair_ids: list[str]) -> list[PaperMarket]:
        if not pair_ids:
            return list(self._book.markets.values())
        return [self._market(p) for p in pair_ids]

    def _settle_time(self) -> float:
        return self._ledger.clock() + block_interval_ms(self.network_id) / 1000

    async def _transaction(self, market: PaperMarket, gas_limit: int) -> dict[str, Any]:
        """Fill and sign the transaction a real client would submit; nothing is broadcast."""
        owner = self._owner()
        nonce = self._book.nonces.get(owner, 0)
        self._book.nonces[owner] = nonce + 1
        # fee fields come from the signer's connection (legacy mode in sessions)
        tx = await self.signer.populate_transaction({
            "to": Web3.to_checksum_address(market.market_address),
            "value": 0,
            "gas": gas_limit,
            "nonce": nonce,
            "chainId": self.network_id,
        })
        raw = self.signer.sign_transaction(tx)
        legacy = "gasPrice" in tx
        return {
            "hash": Web3.to_hex(Web3.keccak(raw)),
            "to": tx["to"],
            "from": tx["from"],
            "nonce": nonce,
            "chainId": self.network_id,
            "gasLimit": str(gas_limit),
            "gasPrice": str(tx["gasPrice"]) if legacy else None,
            "maxFeePerGas": tx.get("maxFeePerGas"),
            "maxPriorityFeePerGas": tx.get("maxPriorityFeePerGas"),
            "value": "0",
            "type": 0 if legacy else 2,
        }

    def _window(self, relative_from_in_sec: int, relative_to_in_sec: int) -> tuple[float, float]:
        now = self._ledger.clock()
        start, end = now - relative_from_in_sec, now - relative_to_in_sec
        return min(start, end), max(start, end)

    # -- wallet ----------------------------------------------------------

    async def balances_in_bank(self, token_addresses: list[str]) -> dict[str, str]:
        owner = self._owner()
        return {
            address: format(self._ledger.balance(self.network_id, owner, address).normalize(), "f")
            for address in token_addresses
        }

    # -- exchange --------------------------------------------------------

    async def get_markets_info(self, pair_ids: list[str]) -> list[dict[str, Any]]:
        return [m.info() for m in self._markets(pair_ids)]

    async def get_tokens_info(self, token_addresses: list[str]) -> list[dict[str, Any]]:
        tokens = self._ledger.tokens(self.network_id)
        if not token_addresses:
            return [t.info() for t in tokens.values()]
        result = []
        for address in token_addresses:
            token = tokens.get(address.lower())
            if token is None:
                raise ValueError(f"Unknown token: {address}")
            result.append(token.info())
        return result

    async def get_volumes(self, pair_ids: list[str], relative_time_in_sec: int) -> dict[str, str]:
        since = self._ledger.clock() - relative_time_in_sec
        volumes: dict[str, str] = {}
        for market in self._markets(pair_ids):
            total = sum(
                Decimal(str(t.volume))
                for t in self._book.trades
                if t.pair_id == market.pair_id and t.timestamp >= since
            )
            volumes[market.market_address] = format(Decimal(total).normalize(), "f")
        return volumes

    async def get_orderbook(self, pair_id: str, price_range: PriceRange) -> dict[str, Any]:
        self._market(pair_id)
        now = self._ledger.clock()
        levels: dict[tuple[Direction, float], Decimal] = {}
        for order in self._book.orders:
            if order.pair_id != pair_id or not order.is_open(now):
                continue
            if not price_range.low <= order.price <= price_range.high:
                continue
            key = (order.direction, order.price)
            levels[key] = levels.get(key, Decimal(0)) + order.selling
        asks = [
            {"direction": d.value, "price": p, "amount": float(a)}
            for (d, p), a in sorted(levels.items(), key=lambda kv: kv[0][1])
            if d is Direction.SELL
        ]
        bids = [
            {"direction": d.value, "price": p, "amount": float(a)}
            for (d, p), a in sorted(levels.items(), key=lambda kv: -kv[0][1])
            if d is Direction.BUY
        ]
        return {"asks": asks, "bids": bids}

    async def get_limit_orders(self, pair_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
        owner = self._owner().lower()
        now = self._ledger.clock()
        result: dict[str, list[dict[str, Any]]] = {}
        for market in self._markets(pair_ids):
            result[market.market_address] = [
                o.detail()
                for o in self._book.orders
                if o.pair_id == market.pair_id and o.owner.lower() == owner and o.is_open(now)
            ]
        return result

    async def place_limit_order(
        self, pair_id: str, direction: Direction, price: float, volume: float
    ) -> dict[str, Any]:
        market = self._market(pair_id)
        owner = self._owner()
        direction = Direction(direction)
        # BUY sells quote (Y) volume; SELL sells base (X) volume
        selling_token = market.token_y if direction is Direction.BUY else market.token_x
        amount = Decimal(str(volume))
        self._ledger.adjust(self.network_id, owner, selling_token.address, -amount)

        tx = await self._transaction(market, 200_000)
        now = self._ledger.clock()
        self._book.orders.append(
            PaperOrder(
                owner=owner,
                pair_id=pair_id,
                direction=direction,
                price=price,
                point=price_to_point(price),
                selling=amount,
                placed_at=now,
                settles_at=self._settle_time(),
                tx_hash=tx["hash"],
            )
        )
        return tx

    async def place_market_order(
        self, pair_id: str, direction: Direction, volume: float, cur_price: float, slippage: float
    ) -> dict[str, Any]:
        market = self._market(pair_id)
        owner = self._owner()
        direction = Direction(direction)
        # slippage is in basis points: 500 means 5%
        deviation = abs(market.price - cur_price) / cur_price
        if deviation > slippage / 10_000:
            raise ValueError(
                f"Price moved beyond slippage: market {market.price}, expected {cur_price}"
            )

        amount = Decimal(str(volume))
        price = Decimal(str(market.price))
        if direction is Direction.BUY:
            spend, receive = market.token_y, market.token_x
            received = amount / price
        else:
            spend, receive = market.token_x, market.token_y
            received = amount * price
        self._ledger.adjust(self.network_id, owner, spend.address, -amount)
        self._ledger.adjust(self.network_id, owner, receive.address, received)

        tx = await self._transaction(market, 300_000)
        self._book.trades.append(
            PaperTrade(
                owner=owner,
                pair_id=pair_id,
                direction=direction,
                volume=volume,
                price=market.price,
                timestamp=self._settle_time(),
                tx_hash=tx["hash"],
            )
        )
        return tx

    def _close_orders(self, pair_id: str, predicate: Callable[[PaperOrder], bool]) -> list[PaperOrder]:
        owner = self._owner().lower()
        now = self._ledger.clock()
        closing = [
            o
            for o in self._book.orders
            if o.pair_id == pair_id
            and o.owner.lower() == owner
            and o.closed_at is None
            and o.settles_at <= now
            and predicate(o)
        ]
        settles_at = self._settle_time()
        for order in closing:
            order.closed_at = settles_at
            market = self._market(pair_id)
            refund_token = market.token_y if order.direction is Direction.BUY else market.token_x
            self._ledger.adjust(self.network_id, order.owner, refund_token.address, order.selling)
        return closing

    async def cancel_limit_order(self, pair_id: str, direction: Direction, point: int) -> dict[str, Any]:
        market = self._market(pair_id)
        direction = Direction(direction)
        closed = self._close_orders(
            pair_id, lambda o: o.direction is direction and o.point == point
        )
        if not closed:
            raise ValueError(f"No open {direction.value} order at point {point} on {pair_id}")
        return await self._transaction(market, 150_000)

    async def cancel_all_limit_order(self, pair_id: str) -> dict[str, Any]:
        market = self._market(pair_id)
        self._close_orders(pair_id, lambda o: True)
        return await self._transaction(market, 500_000)

    def _claim(self, pair_id: str, predicate: Callable[[PaperOrder], bool]) -> None:
        market = self._market(pair_id)
        owner = self._owner().lower()
        for order in self._book.orders:
            if order.pair_id != pair_id or order.owner.lower() != owner or not predicate(order):
                continue
            if order.earned > 0:
                earned_token = market.token_x if order.direction is Direction.BUY else market.token_y
                self._ledger.adjust(self.network_id, order.owner, earned_token.address, order.earned)
                order.earned = Decimal(0)

    async def claim_earning(self, pair_id: str, direction: Direction, point: int) -> dict[str, Any]:
        market = self._market(pair_id)
        direction = Direction(direction)
        self._claim(pair_id, lambda o: o.direction is direction and o.point == point)
        return await self._transaction(market, 180_000)

    async def claim_all_earnings(self, pair_id: str) -> dict[str, Any]:
        market = self._market(pair_id)
        self._claim(pair_id, lambda o: True)
        return await self._transaction(market, 400_000)

    async def get_finished_orders(
        self, pair_ids: list[str], relative_from_in_sec: int, relative_to_in_sec: int
    ) -> dict[str, list[dict[str, Any]]]:
        owner = self._owner().lower()
        start, end = self._window(relative_from_in_sec, relative_to_in_sec)
        now = self._ledger.clock()
        result: dict[str, list[dict[str, Any]]] = {}
        for market in self._markets(pair_ids):
            result[market.market_address] = [
                {
                    "direction": o.direction.value,
                    "volume": float(o.selling),
                    "price": o.price,
                    "timestamp": int(o.closed_at * 1000),
                    "transactionHash": o.tx_hash,
                }
                for o in self._book.orders
                if o.pair_id == market.pair_id
                and o.owner.lower() == owner
                and o.closed_at is not None
                and o.closed_at <= now
                and start <= o.closed_at <= end
            ]
        return result

    async def get_market_order_history(
        self, pair_ids: list[str], relative_from_in_sec: int, relative_to_in_sec: int
    ) -> dict[str, list[dict[str, Any]]]:
        start, end = self._window(relative_from_in_sec, relative_to_in_sec)
        now = self._ledger.clock()
        result: dict[str, list[dict[str, Any]]] = {}
        for market in self._markets(pair_ids):
            result[market.market_address] = [
                t.detail()
                for t in self._book.trades
                if t.pair_id == market.pair_id and t.timestamp <= now and start <= t.timestamp <= end
            ]
        return result

    # -- prices ----------------------------------------------------------

    async def get_prices(self, pair_ids: list[str], relative_time_in_sec: int) -> dict[str, float]:
        at = self._ledger.clock() - relative_time_in_sec
        prices: dict[str, float] = {}
        for market in self._markets(pair_ids):
            price = market.price
            for trade in self._book.trades:
                if trade.pair_id == market.pair_id and trade.timestamp <= at:
                    price = trade.price
            prices[market.market_address] = price
        return prices

    async def get_klines(
        self,
        pair_ids: list[str],
        resolution: KlineResolution,
        relative_from_in_sec: int,
        relative_to_in_sec: int,
    ) -> list[dict[str, Any]]:
        step = _RESOLUTION_SECONDS[KlineResolution(resolution)]
        start, end = self._window(relative_from_in_sec, relative_to_in_sec)
        result: list[dict[str, Any]] = []
        for market in self._markets(pair_ids):
            buckets: dict[int, dict[str, Any]] = {}
            for ts, open_, high, low, close, volume in self._book.candles.get(market.pair_id, []):
                if not start <= ts <= end:
                    continue
                bucket = int(ts // step) * step
                candle = buckets.get(bucket)
                if candle is None:
                    buckets[bucket] = {
                        "symbol": market.pair_id,
                        "time": bucket * 1000,
                        "open": open_,
                        "high": high,
                        "low": low,
                        "close": close,
                        "volume": volume,
                    }
                else:
                    candle["high"] = max(candle["high"], high)
                    candle["low"] = min(candle["low"], low)
                    candle["close"] = close
                    candle["volume"] += volume
            result.extend(buckets[k] for k in sorted(buckets))
        return result

    async def update_kline(self, pair_id: str) -> None:
        """Fold settled trades into the pair's one-minute candle."""
        market = self._market(pair_id)
        now = self._ledger.clock()
        bucket = float(int(now // 60) * 60)
        volume = sum(
            t.volume for t in self._book.trades
            if t.pair_id == pair_id and bucket <= t.timestamp <= now
        )
        candles = self._book.candles.setdefault(pair_id, [])
        if candles and candles[-1][0] == bucket:
            candle = candles[-1]
            candle[2] = max(candle[2], market.price)
            candle[3] = min(candle[3], market.price)
            candle[4] = market.price
            candle[5] = volume
        else:
            candles.append([bucket, market.price, market.price, market.price, market.price, volume])
        logger.debug("kline_updated", network_id=self.network_id, pair_id=pair_id, bucket=bucket)
