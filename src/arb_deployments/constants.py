"""Configuration constants for arb-deployments library."""

# Logical config key for the deployed contract and the artifact it comes from
DEFAULT_LOGICAL_NAME = "arb"
DEFAULT_CONTRACT_NAME = "Arb"
DEFAULT_CONTRACT_VERSION = "1.0.0"

# Deployment tuning
GAS_BUFFER_PERCENT = 20  # Added on top of the node's gas estimate
MIN_CONFIRMATIONS = 2
LOW_BALANCE_THRESHOLD_WEI = 10**17  # 0.1 native units
DEFAULT_CONFIRMATION_TIMEOUT = 300.0  # seconds
DEFAULT_POLL_INTERVAL = 2.0  # seconds
RPC_TIMEOUT = 30  # seconds per HTTP request

# The contract reports its native-currency balance under the zero address
NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"

# Known-bad token used by the self-test group (must never validate)
INVALID_TOKEN_SENTINEL = "0x0000000000000000000000000000000000000001"

# Token the self-test group reads when present in the registry
SELF_TEST_TOKEN_SYMBOL = "USDC"

# Network configuration based on ethereum-lists/chains
NETWORK_CONFIG = {
    "polygon": {
        "chain_id": 137,
        "chain_name": "Polygon Mainnet",
        "native_symbol": "MATIC",
        "block_explorer_url": "https://polygonscan.com",
        "default_rpc_env": "POLYGON_RPC_URL",
        "default_rpc_url": "https://polygon-rpc.com",
    },
    "amoy": {
        "chain_id": 80002,
        "chain_name": "Polygon Amoy",
        "native_symbol": "POL",
        "block_explorer_url": "https://amoy.polygonscan.com",
        "default_rpc_env": "AMOY_RPC_URL",
        "default_rpc_url": "https://rpc-amoy.polygon.technology",
    },
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "native_symbol": "ETH",
        "block_explorer_url": None,
        "default_rpc_env": "LOCALHOST_RPC_URL",
        "default_rpc_url": "http://127.0.0.1:8545",
    },
}
