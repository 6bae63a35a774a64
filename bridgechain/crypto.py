import hashlib

import base58
from coincurve import PrivateKey, PublicKey
from Crypto.Hash import RIPEMD160

from .constants import COMPRESSED_PUBLIC_KEY_BYTES


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def ripemd160(data: bytes) -> bytes:
    return RIPEMD160.new(data).digest()


class KeyPair:
    def __init__(self, private_key: bytes):
        """Initialize a keypair from a 32-byte secp256k1 secret"""
        self.private_key = PrivateKey(private_key)
        self.public_key = self.private_key.public_key

    @classmethod
    def from_passphrase(cls, passphrase: str) -> 'KeyPair':
        """Derive the keypair whose secret is the sha256 of the passphrase"""
        return cls(sha256(passphrase.encode("utf-8")))

    def sign(self, digest: bytes) -> bytes:
        """Sign a 32-byte digest, returning a DER-encoded ECDSA signature"""
        return self.private_key.sign(digest, hasher=None)

    @property
    def public_key_bytes(self) -> bytes:
        return self.public_key.format(compressed=True)

    def export_public(self) -> str:
        """Export the compressed public key as hex"""
        return self.public_key_bytes.hex()

    def address(self, address_prefix: int) -> str:
        return address_from_public_key(self.public_key_bytes, address_prefix)

    def wif(self, wif_prefix: int) -> str:
        """Wallet import format: prefix byte, secret, compression flag"""
        payload = bytes([wif_prefix]) + self.private_key.secret + b"\x01"
        return base58.b58encode_check(payload).decode("ascii")


def address_from_public_key(public_key: bytes, address_prefix: int) -> str:
    """
    Encode a compressed public key as a base58check address.

    Args:
        public_key: 33-byte compressed public key
        address_prefix: Network version byte (pubKeyHash)

    Returns:
        The base58check address
    """
    if len(public_key) != COMPRESSED_PUBLIC_KEY_BYTES:
        raise ValueError(f"Expected a {COMPRESSED_PUBLIC_KEY_BYTES}-byte compressed public key")
    payload = bytes([address_prefix]) + ripemd160(public_key)
    return base58.b58encode_check(payload).decode("ascii")


def decode_address(address: str) -> bytes:
    """Return the raw 21-byte payload (version byte + hash) of an address"""
    payload = base58.b58decode_check(address)
    if len(payload) != 21:
        raise ValueError(f"Invalid address length: {address}")
    return payload


def verify_signature(public_key: bytes, signature: bytes, digest: bytes) -> bool:
    """Verify a DER signature over a digest with a compressed public key"""
    try:
        return PublicKey(public_key).verify(signature, digest, hasher=None)
    except ValueError:
        return False


def prefix_byte_for_character(character: str) -> int:
    """
    Find the version byte whose addresses always start with ``character``.

    Every 21-byte payload encodes to a 34-character address; the leading
    character is fixed by the version byte as long as both the smallest and
    the largest payload for that byte start with it.

    Args:
        character: A single base58 alphabet character

    Returns:
        The smallest matching version byte

    Raises:
        ValueError: If no version byte yields that leading character
    """
    if len(character) != 1 or character not in base58.BITCOIN_ALPHABET.decode("ascii"):
        raise ValueError(f"'{character}' is not a base58 character")

    for version in range(256):
        lowest = base58.b58encode_check(bytes([version]) + b"\x00" * 20).decode("ascii")
        highest = base58.b58encode_check(bytes([version]) + b"\xff" * 20).decode("ascii")
        if lowest[0] == character and highest[0] == character:
            return version

    raise ValueError(f"No address prefix byte produces addresses starting with '{character}'")
