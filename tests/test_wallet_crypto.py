"""Tests for key derivation, addresses and wallet generation."""
from unittest.mock import patch

import base58
import pytest

from bridgechain.crypto import (
    KeyPair,
    address_from_public_key,
    decode_address,
    prefix_byte_for_character,
    sha256,
    verify_signature,
)
from bridgechain.errors import EntropyFailure
from bridgechain.wallet import Wallet, derive_wallets, generate_passphrase

PASSPHRASE = "this is a top secret passphrase"


def test_known_passphrase_derivation():
    wallet = Wallet.from_passphrase(PASSPHRASE, address_prefix=30)

    assert wallet.public_key == "034151a3ec46b5670a682b0a63394f863587d1bc97483b1b6c70eb58e7f0aed192"
    assert wallet.address == "D61mfSggzbvQgTUe6JhYKH2doHaqJ3Dyib"


def test_wallet_determinism():
    first = Wallet.from_passphrase(PASSPHRASE, address_prefix=23)
    for _ in range(3):
        again = Wallet.from_passphrase(PASSPHRASE, address_prefix=23)
        assert again.address == first.address
        assert again.public_key == first.public_key


def test_address_depends_on_prefix():
    mainnet = Wallet.from_passphrase(PASSPHRASE, address_prefix=23)
    devnet = Wallet.from_passphrase(PASSPHRASE, address_prefix=30)

    assert mainnet.public_key == devnet.public_key
    assert mainnet.address.startswith("A")
    assert devnet.address.startswith("D")


def test_wif_layout():
    wallet = Wallet.from_passphrase(PASSPHRASE, address_prefix=23, wif_prefix=170)
    payload = base58.b58decode_check(wallet.wif)

    assert payload[0] == 170
    assert payload[1:33] == sha256(PASSPHRASE.encode("utf-8"))
    assert payload[33:] == b"\x01"


def test_decode_address():
    keys = KeyPair.from_passphrase(PASSPHRASE)
    payload = decode_address(address_from_public_key(keys.public_key_bytes, 23))

    assert len(payload) == 21
    assert payload[0] == 23


def test_address_rejects_uncompressed_key():
    with pytest.raises(ValueError):
        address_from_public_key(b"\x04" + b"\x00" * 64, 23)


def test_sign_and_verify():
    keys = KeyPair.from_passphrase(PASSPHRASE)
    digest = sha256(b"payload")
    signature = keys.sign(digest)

    assert verify_signature(keys.public_key_bytes, signature, digest)
    assert not verify_signature(keys.public_key_bytes, signature, sha256(b"other payload"))
    other = KeyPair.from_passphrase("another passphrase")
    assert not verify_signature(other.public_key_bytes, signature, digest)


def test_signatures_are_deterministic():
    keys = KeyPair.from_passphrase(PASSPHRASE)
    digest = sha256(b"payload")
    assert keys.sign(digest) == keys.sign(digest)


@pytest.mark.parametrize("character,version", [("A", 23), ("D", 30)])
def test_prefix_byte_for_character(character, version):
    assert prefix_byte_for_character(character) == version


@pytest.mark.parametrize("character", ["0", "O", "AB", ""])
def test_prefix_byte_rejects_non_base58(character):
    with pytest.raises(ValueError):
        prefix_byte_for_character(character)


def test_generate_passphrase_is_twelve_words():
    words = generate_passphrase().split()
    assert len(words) == 12


def test_generate_passphrase_entropy_failure():
    with patch("bridgechain.wallet.secrets.token_bytes", side_effect=OSError("no entropy")):
        with pytest.raises(EntropyFailure):
            generate_passphrase()


def test_derive_wallets():
    genesis, delegates = derive_wallets(5, address_prefix=23)

    assert len(delegates) == 5
    passphrases = {genesis.passphrase} | {wallet.passphrase for wallet in delegates}
    assert len(passphrases) == 6
    for wallet in [genesis] + delegates:
        assert Wallet.from_passphrase(wallet.passphrase, 23).address == wallet.address


def test_derive_wallets_rejects_repeated_passphrase():
    with patch("bridgechain.wallet.generate_passphrase", return_value=PASSPHRASE):
        with pytest.raises(EntropyFailure):
            derive_wallets(2, address_prefix=23)


def test_derive_wallets_requires_a_delegate():
    with pytest.raises(ValueError):
        derive_wallets(0, address_prefix=23)


def test_wallet_repr_hides_passphrase():
    wallet = Wallet.from_passphrase(PASSPHRASE, address_prefix=23)
    assert PASSPHRASE not in repr(wallet)
    assert "passphrase" not in wallet.to_dict()


def test_empty_passphrase_rejected():
    with pytest.raises(ValueError):
        Wallet.from_passphrase("", address_prefix=23)
