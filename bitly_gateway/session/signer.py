"""Wallet signer bound to an RPC connection."""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount

from bitly_gateway.infra.errors import UnauthorizedError


class WalletSigner:
    """Signing identity derived from the wallet credential.

    Transactions are filled from the bound connection: nonce, chain id and
    fee fields (gasPrice when the connection reports legacy fee data).
    """

    def __init__(self, account: LocalAccount, connection: Any) -> None:
        self._account = account
        self.connection = connection

    @classmethod
    def from_credential(cls, credential: str, connection: Any) -> WalletSigner:
        """Derive a signer. Raises UnauthorizedError with the underlying cause."""
        try:
            account = Account.from_key(credential)
        except Exception as e:
            cause = str(e) or type(e).__name__
            raise UnauthorizedError(f"Invalid wallet configuration: {cause}") from e
        return cls(account, connection)

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(tx)
        # eth-account renamed rawTransaction -> raw_transaction
        return getattr(signed, "raw_transaction", None) or signed.rawTransaction

    async def populate_transaction(self, tx: dict[str, Any]) -> dict[str, Any]:
        filled = dict(tx)
        filled.setdefault("from", self.address)
        filled.setdefault("chainId", self.connection.network_id)
        if "nonce" not in filled:
            filled["nonce"] = await self.connection.get_transaction_count(self.address, "pending")

        if not any(k in filled for k in ("gasPrice", "maxFeePerGas")):
            fee_data = await self.connection.get_fee_data()
            if fee_data.is_legacy:
                filled["gasPrice"] = fee_data.gas_price
            else:
                filled["maxFeePerGas"] = fee_data.max_fee_per_gas
                filled["maxPriorityFeePerGas"] = fee_data.max_priority_fee_per_gas

        if "gas" not in filled:
            filled["gas"] = await self.connection.estimate_gas(filled)
        return filled

