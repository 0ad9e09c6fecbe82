"""RPC connection handles and fee-estimate wrappers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3

from bitly_gateway.constants import DEFAULT_PRIORITY_FEE_WEI

logger = structlog.get_logger()


@dataclass(frozen=True)
class FeeData:
    """Fee estimate in wei. Legacy mode sets only gas_price."""

    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    last_base_fee_per_gas: int | None = None

    @property
    def is_legacy(self) -> bool:
        return self.max_fee_per_gas is None and self.max_priority_fee_per_gas is None

    def as_dict(self) -> dict[str, int | None]:
        data = asdict(self)
        return {
            "gasPrice": data["gas_price"],
            "maxFeePerGas": data["max_fee_per_gas"],
            "maxPriorityFeePerGas": data["max_priority_fee_per_gas"],
            "lastBaseFeePerGas": data["last_base_fee_per_gas"],
        }


class RpcConnection:
    """Connection handle for one network's JSON-RPC endpoint.

    Construction never touches the network; reachability problems surface
    on the first call.
    """

    def __init__(self, network_id: int, endpoint: str, web3: AsyncWeb3 | None = None) -> None:
        self.network_id = network_id
        self.endpoint = endpoint
        self.web3 = web3 if web3 is not None else AsyncWeb3(AsyncHTTPProvider(endpoint))

    def __repr__(self) -> str:
        # endpoint embeds the RPC API key
        return f"RpcConnection(network_id={self.network_id})"

    async def get_fee_data(self) -> FeeData:
        gas_price = await self.web3.eth.gas_price
        block = await self.web3.eth.get_block("latest")
        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            return FeeData(gas_price=gas_price)
        priority = DEFAULT_PRIORITY_FEE_WEI
        return FeeData(
            gas_price=gas_price,
            max_fee_per_gas=int(base_fee) * 2 + priority,
            max_priority_fee_per_gas=priority,
            last_base_fee_per_gas=int(base_fee),
        )

    async def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return await self.web3.eth.get_transaction_count(address, block)

    async def estimate_gas(self, tx: dict[str, Any]) -> int:
        return await self.web3.eth.estimate_gas(tx)


class LegacyFeeConnection:
    """Connection wrapper that pins fee estimates to legacy (type 0) mode.

    get_fee_data() always returns the gas price observed when the wrapper was
    installed, with every EIP-1559 field nulled, so transaction builders take
    the legacy gas-price path. Everything else delegates to the inner
    connection.
    """

    def __init__(self, inner: Any, gas_price: int | None) -> None:
        self._inner = inner
        self._fee_data = FeeData(gas_price=gas_price)

    @classmethod
    async def install(cls, inner: Any) -> LegacyFeeConnection:
        observed = await inner.get_fee_data()
        logger.info(
            "legacy_fee_mode_installed",
            network_id=getattr(inner, "network_id", None),
            gas_price=observed.gas_price,
        )
        return cls(inner, observed.gas_price)

    @property
    def inner(self) -> Any:
        return self._inner

    async def get_fee_data(self) -> FeeData:
        return self._fee_data

    def __getattr__(self, name: str) -> Any:
        return getattr(self._inner, name)

    def __repr__(self) -> str:
        return f"LegacyFeeConnection({self._inner!r}, gas_price={self._fee_data.gas_price})"
