"""Constants for the portal deposit smoke flow."""

ETHER = 10**18

DEFAULT_NODE_URL = "http://localhost:8888"

# OptimismPortal proxy on the local devnet
DEFAULT_PORTAL_ADDRESS = "0xEE915F299A6d1eFf68c6EA22E5f93cFD551936F3"
PORTAL_NAME = "OptimismPortal"

BURN_ADDRESS = "0x0000000000000000000000000000000000000000"

DEFAULT_BALANCE_METHOD = "anvil_setBalance"

DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_POLL_INTERVAL = 1.0

FUNDING_BALANCE = 10 * ETHER
TRANSFER_VALUE = ETHER // 100
TRANSFER_GAS = 21_000
TRANSFER_NONCE = 0

DEPOSIT_VALUE = ETHER
DEPOSIT_MINT_VALUE = ETHER // 2
DEPOSIT_GAS_LIMIT = 1_000_000

# gasLimit from the rollup config outputs
L2_GAS_LIMIT = 25_000_000

UINT64_MAX = 2**64 - 1
