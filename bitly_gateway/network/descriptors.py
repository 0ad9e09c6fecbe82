"""Built-in table of supported networks.

Adding a network only requires a new NETWORKS entry; dispatch and session
code look networks up by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from bitly_gateway.constants import DEFAULT_BLOCK_TIME_MS


@dataclass(frozen=True)
class NetworkDescriptor:
    network_id: int
    name: str
    endpoint_template: str  # may contain {api_key}
    block_interval_ms: int = DEFAULT_BLOCK_TIME_MS

    def endpoint_for(self, api_key: str) -> str:
        """Interpolate the RPC API key. Templates without a placeholder ignore it."""
        if "{api_key}" not in self.endpoint_template:
            return self.endpoint_template
        return self.endpoint_template.format(api_key=api_key)


NETWORKS: MappingProxyType[int, NetworkDescriptor] = MappingProxyType({
    d.network_id: d
    for d in (
        NetworkDescriptor(84532, "base-sepolia", "https://base-sepolia.infura.io/v3/{api_key}"),
        NetworkDescriptor(8453, "base-mainnet", "https://base-mainnet.infura.io/v3/{api_key}"),
        NetworkDescriptor(137, "polygon-mainnet", "https://polygon-mainnet.infura.io/v3/{api_key}"),
        NetworkDescriptor(690, "redstone", "https://rpc.redstonechain.com"),
    )
})


def block_interval_ms(network_id: int, default: int = DEFAULT_BLOCK_TIME_MS) -> int:
    descriptor = NETWORKS.get(network_id)
    return descriptor.block_interval_ms if descriptor else default
