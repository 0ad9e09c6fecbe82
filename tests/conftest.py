"""Shared pytest fixtures for gateway tests.

No test touches a real RPC endpoint: connections are FakeConnection
instances built through the injectable connection factory, and settlement
waits run on a FakeClock whose sleep() advances time instantly.
"""

from __future__ import annotations

import pytest

from bitly_gateway.config.runtime import encode_config_source
from bitly_gateway.config.store import ConfigStore
from bitly_gateway.network.rpc import FeeData

# Well-known throwaway development key; never funded.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TEST_RPC_KEY = "test-rpc-key"
BASE_URL = "https://gateway.test/mcp"


class FakeConnection:
    """In-memory stand-in for RpcConnection."""

    def __init__(
        self,
        network_id: int,
        endpoint: str,
        *,
        gas_price: int = 1_000_000_000,
        base_fee: int | None = 400_000_000,
    ) -> None:
        self.network_id = network_id
        self.endpoint = endpoint
        self.gas_price = gas_price
        self.base_fee = base_fee
        self.fee_calls = 0
        self.nonce = 0

    async def get_fee_data(self) -> FeeData:
        self.fee_calls += 1
        if self.base_fee is None:
            return FeeData(gas_price=self.gas_price)
        return FeeData(
            gas_price=self.gas_price,
            max_fee_per_gas=self.base_fee * 2 + 1_500_000_000,
            max_priority_fee_per_gas=1_500_000_000,
            last_base_fee_per_gas=self.base_fee,
        )

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return self.nonce

    async def estimate_gas(self, tx: dict) -> int:
        return 21_000


class FakeClock:
    """Manual clock; sleep() records the delay and advances time."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ConnectionRecorder:
    """Connection factory that remembers every connection it built."""

    def __init__(self) -> None:
        self.built: list[FakeConnection] = []

    def __call__(self, network_id: int, endpoint: str) -> FakeConnection:
        connection = FakeConnection(network_id, endpoint)
        self.built.append(connection)
        return connection


def make_source(
    credential: str | None = TEST_PRIVATE_KEY,
    rpc_api_key: str | None = TEST_RPC_KEY,
    **extra: str,
) -> str:
    payload: dict[str, str] = dict(extra)
    if credential is not None:
        payload["walletCredential"] = credential
    if rpc_api_key is not None:
        payload["rpcApiKey"] = rpc_api_key
    return encode_config_source(BASE_URL, payload)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def connections() -> ConnectionRecorder:
    return ConnectionRecorder()


@pytest.fixture
def store(connections: ConnectionRecorder) -> ConfigStore:
    """Unconfigured store wired to fake connections."""
    return ConfigStore(connection_factory=connections)


@pytest.fixture
def valid_source() -> str:
    return make_source()
