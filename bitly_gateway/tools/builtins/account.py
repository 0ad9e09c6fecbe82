"""Wallet-scoped read tools: exchange balances and open orders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bitly_gateway.tools.base import SessionTool, ToolGroup
from bitly_gateway.tools.params import BalanceParams, PairsParams

if TYPE_CHECKING:
    from bitly_gateway.exchange.client import ExchangeClient


class GetBalanceTool(SessionTool):
    """Balance deposited in the exchange for one token."""

    @property
    def name(self) -> str:
        return "get_balance"

    @property
    def description(self) -> str:
        return (
            "Retrieves the current token balance deposited in Bitly Exchange for a specific "
            "token contract. Requires network ID (chain ID) and ERC20 token contract address. "
            "Returns a JSON object mapping the token address to its real (human-readable) "
            "balance amount."
        )

    @property
    def params_model(self) -> type[BalanceParams]:
        return BalanceParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.account

    async def invoke(self, client: ExchangeClient, params: BalanceParams) -> Any:
        return await client.balances_in_bank([params.token_address])


class GetMyOpenOrdersTool(SessionTool):
    @property
    def name(self) -> str:
        return "get_my_open_orders"

    @property
    def description(self) -> str:
        return (
            "Lists all currently open limit orders for the authenticated wallet across the "
            "given trading pairs. Requires network ID and array of pair IDs. Returns an object "
            "mapping market addresses to arrays of orders with sold, earned, selling, price "
            "and direction."
        )

    @property
    def params_model(self) -> type[PairsParams]:
        return PairsParams

    @property
    def group(self) -> ToolGroup:
        return ToolGroup.account

    async def invoke(self, client: ExchangeClient, params: PairsParams) -> Any:
        return await client.get_limit_orders(params.pair_ids)
