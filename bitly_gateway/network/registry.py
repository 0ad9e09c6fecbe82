"""NetworkRegistry: per-network RPC connections derived from a RuntimeConfig.

Built fresh on every successful reconfiguration; never mutated after build.
Readers hold a reference to one complete registry, so a rebuild elsewhere
never exposes a partially built mapping.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from bitly_gateway.infra.errors import ProviderInitError
from bitly_gateway.network.descriptors import NETWORKS, NetworkDescriptor
from bitly_gateway.network.rpc import LegacyFeeConnection, RpcConnection

if TYPE_CHECKING:
    from bitly_gateway.config.runtime import RuntimeConfig

logger = structlog.get_logger()

ConnectionFactory = Callable[[int, str], Any]


class NetworkEntry:
    """A registered network with its live RPC connection.

    The legacy fee wrapper is installed at most once per entry and then
    shared by every session built on this connection.
    """

    def __init__(self, descriptor: NetworkDescriptor, connection: Any) -> None:
        self.descriptor = descriptor
        self.connection = connection
        self._legacy: LegacyFeeConnection | None = None
        self._install_lock = asyncio.Lock()

    @property
    def network_id(self) -> int:
        return self.descriptor.network_id

    @property
    def legacy(self) -> LegacyFeeConnection | None:
        return self._legacy

    async def legacy_connection(self) -> LegacyFeeConnection:
        if self._legacy is not None:
            return self._legacy
        async with self._install_lock:
            if self._legacy is None:
                self._legacy = await LegacyFeeConnection.install(self.connection)
        return self._legacy


class NetworkRegistry(Mapping[int, NetworkEntry]):
    """Immutable mapping of network id -> NetworkEntry."""

    def __init__(self, entries: dict[int, NetworkEntry] | None = None) -> None:
        self._entries: dict[int, NetworkEntry] = dict(entries or {})

    @classmethod
    def empty(cls) -> NetworkRegistry:
        return cls()

    def __getitem__(self, network_id: int) -> NetworkEntry:
        return self._entries[network_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, network_id: int) -> NetworkEntry:
        """Get entry by network id.

        Raises KeyError if the network is not configured.
        """
        if network_id not in self._entries:
            msg = f"Network {network_id} not configured (available: {self.network_ids()})"
            raise KeyError(msg)
        return self._entries[network_id]

    def connection(self, network_id: int) -> Any:
        return self.get_entry(network_id).connection

    def network_ids(self) -> list[int]:
        return list(self._entries.keys())


def build_network_registry(
    config: RuntimeConfig,
    descriptors: Mapping[int, NetworkDescriptor] = NETWORKS,
    connection_factory: ConnectionFactory = RpcConnection,
) -> NetworkRegistry:
    """Construct one RPC connection per descriptor.

    Raises ProviderInitError if the RPC key is empty or any connection fails
    to construct. Connections are not probed for liveness.
    """
    if not config.rpc_api_key:
        raise ProviderInitError("rpcApiKey is required in config")

    entries: dict[int, NetworkEntry] = {}
    for network_id, descriptor in descriptors.items():
        endpoint = descriptor.endpoint_for(config.rpc_api_key)
        try:
            connection = connection_factory(network_id, endpoint)
        except Exception as e:
            raise ProviderInitError(
                f"Failed to initialize provider for network {network_id} "
                f"({descriptor.name}): {e}"
            ) from e
        entries[network_id] = NetworkEntry(descriptor, connection)

    registry = NetworkRegistry(entries)
    logger.info("network_registry_built", networks=registry.network_ids())
    return registry
