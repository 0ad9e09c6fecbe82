"""Process-wide runtime state held as one atomically swappable snapshot.

Readers take ``store.snapshot`` (a single attribute read, no lock) and work
from that immutable GatewayState for the rest of the call. Writers serialize
on a lock, build the complete new state off to the side and swap it in with
one assignment; the last writer to complete wins.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from bitly_gateway.config.runtime import RuntimeConfig, decode_config
from bitly_gateway.infra.errors import ConfigDecodeError, GatewayError, ProviderInitError
from bitly_gateway.network.descriptors import NETWORKS, NetworkDescriptor
from bitly_gateway.network.registry import (
    ConnectionFactory,
    NetworkRegistry,
    build_network_registry,
)
from bitly_gateway.network.rpc import RpcConnection

if TYPE_CHECKING:
    from bitly_gateway.config.settings import Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class GatewayState:
    config: RuntimeConfig | None
    registry: NetworkRegistry

    @classmethod
    def unconfigured(cls) -> GatewayState:
        return cls(config=None, registry=NetworkRegistry.empty())

    @property
    def is_configured(self) -> bool:
        return self.config is not None and len(self.registry) > 0


@dataclass(frozen=True)
class ReconfigureResult:
    ok: bool
    message: str
    code: str | None = None
    networks: list[int] = field(default_factory=list)
    changed: bool = False
    error: GatewayError | None = None


class ConfigStore:
    """Owner of the current GatewayState."""

    def __init__(
        self,
        descriptors: Mapping[int, NetworkDescriptor] = NETWORKS,
        connection_factory: ConnectionFactory = RpcConnection,
    ) -> None:
        self._descriptors = descriptors
        self._connection_factory = connection_factory
        self._state = GatewayState.unconfigured()
        self._write_lock = asyncio.Lock()

    @property
    def snapshot(self) -> GatewayState:
        return self._state

    async def reconfigure(self, source: str) -> ReconfigureResult:
        """Decode source, rebuild the registry and swap state.

        Never raises for decode or build failures; on failure the previous
        state is kept and the error is reported in the result. A source that
        decodes to the configuration already in effect keeps the current
        registry, so its connections and fee overrides are reused.
        """
        async with self._write_lock:
            try:
                config = decode_config(source)
                if config == self._state.config:
                    networks = self._state.registry.network_ids()
                    logger.debug("reconfigure_unchanged", networks=networks)
                    return ReconfigureResult(
                        ok=True, message="Configuration unchanged", networks=networks,
                    )
                registry = build_network_registry(
                    config, self._descriptors, self._connection_factory,
                )
            except (ConfigDecodeError, ProviderInitError) as e:
                logger.warning("reconfigure_failed", code=e.code, error=str(e))
                return ReconfigureResult(ok=False, message=str(e), code=e.code, error=e)

            self._state = GatewayState(config=config, registry=registry)

        networks = registry.network_ids()
        logger.info("reconfigured", networks=networks)
        return ReconfigureResult(
            ok=True,
            message="Configuration updated successfully",
            networks=networks,
            changed=True,
        )

    async def reconfigure_from_env(self, settings: Settings) -> ReconfigureResult | None:
        """Apply MCP_SERVER_URL once at startup, if set."""
        source = settings.startup.server_url
        if not source:
            logger.info("startup_config_absent", msg="Configuration required via URL")
            return None
        logger.info("startup_config_found", source="MCP_SERVER_URL")
        return await self.reconfigure(source)
