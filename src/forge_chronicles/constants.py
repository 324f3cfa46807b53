"""Configuration constants for forge-chronicles library."""

# Only OpenZeppelin's TransparentUpgradeableProxy is understood
PROXY_TYPE = "TransparentUpgradeableProxy"

# bytes32(uint256(keccak256("eip1967.proxy.implementation")) - 1)
IMPLEMENTATION_SLOT = "0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc"

# Broadcast transaction types that create a contract
CREATE_KINDS = ("CREATE", "CREATE2")

# Display keys look like "Name#tag"
TAG_SEPARATOR = "#"

# 4 bytes of the initcode hash, as shown to (and typed by) users
SHORT_HASH_LENGTH = 8

# Foundry project defaults
DEFAULT_CHAIN_ID = 31337
DEFAULT_SCRIPT_NAME = "Deploy.s.sol"
DEFAULT_BROADCAST_DIR = "broadcast"
DEFAULT_OUT_DIR = "out"
DEFAULT_RECORDS_DIR = "deployments/json"

# Environment variable consulted when no RPC URL is passed explicitly
RPC_URL_ENV = "ETH_RPC_URL"
