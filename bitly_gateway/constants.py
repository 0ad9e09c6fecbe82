SERVER_NAME = "bitly-mcp-gateway"
SERVER_VERSION = "0.1.0"

# Query parameter carrying the base64-encoded runtime configuration.
CONFIG_QUERY_PARAM = "config"

DEFAULT_BLOCK_TIME_MS = 2000
SETTLEMENT_MARGIN_MS = 1000

# Fixed priority fee used when synthesizing EIP-1559 estimates (1.5 gwei).
DEFAULT_PRIORITY_FEE_WEI = 1_500_000_000
