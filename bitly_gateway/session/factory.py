"""Per-invocation exchange sessions.

Every tool call gets a fresh session: snapshot check → network lookup →
legacy fee mode → signer → exchange client. Nothing is cached across calls
except the connection-scoped legacy fee wrapper held by the registry entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from bitly_gateway.config.store import ConfigStore
from bitly_gateway.exchange.client import ExchangeClient, ExchangeClientFactory
from bitly_gateway.infra.errors import NotConfiguredError, UnknownNetworkError
from bitly_gateway.session.signer import WalletSigner

if TYPE_CHECKING:
    from bitly_gateway.config.store import GatewayState

logger = structlog.get_logger()


@dataclass(frozen=True)
class ExchangeSession:
    network_id: int
    connection: Any
    signer: WalletSigner
    client: ExchangeClient


def _configured_state(store: ConfigStore) -> GatewayState:
    state = store.snapshot
    if not state.is_configured:
        raise NotConfiguredError()
    return state


async def _legacy_connection(state: GatewayState, network_id: int) -> Any:
    if network_id not in state.registry:
        raise UnknownNetworkError(network_id, state.registry.network_ids())
    return await state.registry.get_entry(network_id).legacy_connection()


def _signer(state: GatewayState, connection: Any) -> WalletSigner:
    return WalletSigner.from_credential(
        state.config.wallet_credential.get_secret_value(), connection,
    )


class SessionFactory:
    def __init__(self, store: ConfigStore, client_factory: ExchangeClientFactory) -> None:
        self._store = store
        self._client_factory = client_factory

    async def create_session(self, network_id: int) -> ExchangeSession:
        """Build an authenticated session bound to network_id.

        Raises NotConfiguredError, UnknownNetworkError or UnauthorizedError.
        """
        state = _configured_state(self._store)
        connection = await _legacy_connection(state, network_id)
        signer = _signer(state, connection)

        client = self._client_factory(network_id, connection)
        await client.set_signer(signer)

        logger.debug("session_created", network_id=network_id, signer=signer.address)
        return ExchangeSession(
            network_id=network_id, connection=connection, signer=signer, client=client,
        )

    async def rebind(self, session: ExchangeSession) -> ExchangeSession:
        """Point the session's client at the live snapshot's connection.

        When the registry was rebuilt after the session was created, the new
        connection gets its legacy fee wrapper and a signer derived from the
        live credential is bound to it. Raises the same errors as
        create_session.
        """
        state = _configured_state(self._store)
        connection = await _legacy_connection(state, session.network_id)
        signer = session.signer
        if connection is not session.connection:
            signer = _signer(state, connection)
            await session.client.set_signer(signer)
            logger.info("session_rebound", network_id=session.network_id, signer=signer.address)

        await session.client.set_provider(connection)
        return ExchangeSession(
            network_id=session.network_id,
            connection=connection,
            signer=signer,
            client=session.client,
        )
