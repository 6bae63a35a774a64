"""Constants for the bridgechain generator."""

# Wire format limits
MAX_UINT64 = 2**64 - 1

# Block limits: maxPayload = PAYLOAD_BYTES_PER_50_TRANSACTIONS / 50 * maxTransactions
PAYLOAD_BYTES_PER_50_TRANSACTIONS = 2097152
BLOCK_VERSION = 0
MULTI_PAYMENT_LIMIT = 256

# Genesis block
GENESIS_HEIGHT = 1
GENESIS_TIMESTAMP = 0  # Seconds since the milestone epoch
PREVIOUS_BLOCK_SENTINEL = b"\x00" * 8

# Transactions
TRANSACTION_HEADER = 0xFF
TRANSACTION_VERSION = 2
CORE_TYPE_GROUP = 1
DELEGATE_USERNAME_PREFIX = "genesis_"

# Keys
DEFAULT_WIF_PREFIX = 170
PASSPHRASE_ENTROPY_BYTES = 16  # 12-word BIP39 passphrases
COMPRESSED_PUBLIC_KEY_BYTES = 33

# Fee schedule split across the first two milestones
CORE_FEE_TYPES = (
    "transfer",
    "secondSignature",
    "delegateRegistration",
    "vote",
    "multiSignature",
)
EXTENDED_FEE_TYPES = (
    "ipfs",
    "multiPayment",
    "delegateResignation",
)

# Artifact layout
CORE_DIR = "core"
CRYPTO_DIR = "crypto"
PLUGINS_FILE = "plugins.js"
ENV_FILE = ".env"
SENSITIVE_FILE_MODE = 0o600
