import secrets
from typing import List, Tuple

import structlog
from mnemonic import Mnemonic

from .constants import DEFAULT_WIF_PREFIX, PASSPHRASE_ENTROPY_BYTES
from .crypto import KeyPair
from .errors import EntropyFailure

logger = structlog.get_logger()

_mnemonic = Mnemonic("english")


def generate_passphrase() -> str:
    """
    Generate a fresh 12-word BIP39 passphrase from the OS CSPRNG.

    Raises:
        EntropyFailure: If secure randomness is unavailable
    """
    try:
        entropy = secrets.token_bytes(PASSPHRASE_ENTROPY_BYTES)
    except (OSError, NotImplementedError) as e:
        logger.error("entropy_unavailable", error_type=type(e).__name__)
        raise EntropyFailure(f"Secure randomness unavailable: {e}") from e
    return _mnemonic.to_mnemonic(entropy)


class Wallet:
    """A passphrase with the keys and address it deterministically derives.

    The address and public key are pure functions of the passphrase and the
    network prefixes, so ``Wallet.from_passphrase`` always recovers the same
    wallet.
    """

    def __init__(self, passphrase: str, keys: KeyPair, address_prefix: int, wif_prefix: int):
        self.passphrase = passphrase
        self.keys = keys
        self.address_prefix = address_prefix
        self.wif_prefix = wif_prefix
        self.public_key = keys.export_public()
        self.address = keys.address(address_prefix)

    @classmethod
    def from_passphrase(cls, passphrase: str, address_prefix: int,
                        wif_prefix: int = DEFAULT_WIF_PREFIX) -> "Wallet":
        """
        Derive a wallet from an existing passphrase

        Args:
            passphrase: Secret passphrase
            address_prefix: Network address version byte
            wif_prefix: Network private key version byte

        Returns:
            Wallet instance
        """
        if not passphrase:
            raise ValueError("Passphrase must not be empty")
        return cls(passphrase, KeyPair.from_passphrase(passphrase), address_prefix, wif_prefix)

    @classmethod
    def generate(cls, address_prefix: int, wif_prefix: int = DEFAULT_WIF_PREFIX) -> "Wallet":
        """Create a wallet from a newly generated passphrase"""
        return cls.from_passphrase(generate_passphrase(), address_prefix, wif_prefix)

    @property
    def wif(self) -> str:
        return self.keys.wif(self.wif_prefix)

    def sign(self, digest: bytes) -> str:
        """Sign a 32-byte digest, returning the hex DER signature"""
        return self.keys.sign(digest).hex()

    def to_dict(self) -> dict:
        """Public identity only; the passphrase is never included"""
        return {"address": self.address, "publicKey": self.public_key}

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r})"


def derive_wallets(count: int, address_prefix: int,
                   wif_prefix: int = DEFAULT_WIF_PREFIX) -> Tuple[Wallet, List[Wallet]]:
    """
    Generate the genesis wallet and one wallet per forging delegate.

    Every wallet gets its own freshly generated passphrase.

    Args:
        count: Number of delegate wallets
        address_prefix: Network address version byte
        wif_prefix: Network private key version byte

    Returns:
        Tuple of (genesis wallet, delegate wallets)

    Raises:
        EntropyFailure: If randomness fails or a passphrase repeats within the run
    """
    if count < 1:
        raise ValueError("At least one delegate wallet is required")

    wallets = []
    seen = set()
    for _ in range(count + 1):
        wallet = Wallet.generate(address_prefix, wif_prefix)
        if wallet.passphrase in seen:
            raise EntropyFailure("Randomness source produced a repeated passphrase")
        seen.add(wallet.passphrase)
        wallets.append(wallet)

    genesis_wallet, delegates = wallets[0], wallets[1:]
    logger.info("wallets_derived",
                genesis_address=genesis_wallet.address,
                delegates=len(delegates))
    return genesis_wallet, delegates
