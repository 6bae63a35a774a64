"""Tests for genesis transaction building and serialization."""
import struct

import pytest
from pydantic import ValidationError

from bridgechain.constants import MAX_UINT64
from bridgechain.transaction import (
    Transaction,
    TransactionType,
    build_delegate_registration,
    build_transfer,
    build_vote,
)


@pytest.fixture
def sender(genesis_wallet):
    return genesis_wallet


@pytest.fixture
def recipient(delegate_wallets):
    return delegate_wallets[0]


def test_transfer_is_signed_and_verifies(sender, recipient):
    tx = build_transfer(sender, recipient.address, 12345, fee=0, nonce=1)

    assert tx.signature
    assert tx.id == tx.compute_id()
    assert tx.verify()


def test_transfer_serialization_layout(sender, recipient):
    tx = build_transfer(sender, recipient.address, 12345, fee=7, nonce=1)
    raw = tx.serialize(include_signature=False)

    assert raw[:3] == bytes([0xFF, 2, sender.address_prefix])
    type_group, tx_type, nonce = struct.unpack("<IHQ", raw[3:17])
    assert (type_group, tx_type, nonce) == (1, 0, 1)
    assert raw[17:50].hex() == sender.public_key
    assert struct.unpack("<Q", raw[50:58])[0] == 7
    assert raw[58] == 0  # empty vendor field
    amount, expiration = struct.unpack("<QI", raw[59:71])
    assert (amount, expiration) == (12345, 0)
    assert len(raw) == 71 + 21
    assert tx.serialize() == raw + bytes.fromhex(tx.signature)


def test_tampered_transaction_fails_verification(sender, recipient):
    tx = build_transfer(sender, recipient.address, 100, fee=0, nonce=1)
    tampered = tx.model_copy(update={"amount": 101})
    assert not tampered.verify()


def test_unsigned_transaction_does_not_verify(sender, recipient):
    tx = Transaction(
        type=TransactionType.TRANSFER,
        network=sender.address_prefix,
        nonce=1,
        sender_public_key=sender.public_key,
        amount=1,
        recipient_id=recipient.address,
    )
    assert not tx.verify()


def test_sign_requires_matching_wallet(sender, recipient):
    tx = Transaction(
        type=TransactionType.TRANSFER,
        network=sender.address_prefix,
        nonce=1,
        sender_public_key=sender.public_key,
        amount=1,
        recipient_id=recipient.address,
    )
    with pytest.raises(ValueError):
        tx.sign(recipient)


def test_delegate_registration(recipient):
    tx = build_delegate_registration(recipient, "genesis_1", fee=2500000000, nonce=1)

    assert tx.type == TransactionType.DELEGATE_REGISTRATION
    assert tx.asset == {"delegate": {"username": "genesis_1"}}
    assert tx.serialize(include_signature=False).endswith(b"\x09genesis_1")
    assert tx.verify()


def test_self_vote(recipient):
    tx = build_vote(recipient, [recipient.public_key], fee=100000000, nonce=2)

    assert tx.recipient_id == recipient.address
    assert tx.asset == {"votes": [f"+{recipient.public_key}"]}
    assert tx.serialize(include_signature=False).endswith(
        b"\x01\x01" + bytes.fromhex(recipient.public_key)
    )
    assert tx.verify()


def test_dict_round_trip_preserves_id(sender, recipient):
    for tx in (
        build_transfer(sender, recipient.address, 10**18, fee=0, nonce=3),
        build_delegate_registration(recipient, "genesis_1", fee=25, nonce=1),
        build_vote(recipient, [recipient.public_key], fee=1, nonce=2),
    ):
        data = tx.to_dict()
        restored = Transaction.from_dict(data)

        assert restored.id == tx.id
        assert restored.compute_id() == tx.id
        assert restored.verify()


def test_amounts_serialized_as_strings(sender, recipient):
    data = build_transfer(sender, recipient.address, 10**18, fee=0, nonce=1).to_dict()

    assert data["amount"] == str(10**18)
    assert data["fee"] == "0"
    assert data["nonce"] == "1"
    assert data["recipientId"] == recipient.address
    assert data["expiration"] == 0


def test_amount_bounded_by_uint64(sender, recipient):
    with pytest.raises(ValidationError):
        Transaction(
            type=TransactionType.TRANSFER,
            network=sender.address_prefix,
            nonce=1,
            sender_public_key=sender.public_key,
            amount=MAX_UINT64 + 1,
            recipient_id=recipient.address,
        )


def _transfer_with_vendor_field(sender, recipient, vendor_field):
    return Transaction(
        type=TransactionType.TRANSFER,
        network=sender.address_prefix,
        nonce=1,
        sender_public_key=sender.public_key,
        amount=1,
        recipient_id=recipient.address,
        vendor_field=vendor_field,
    )


def test_vendor_field_limit(sender, recipient):
    with pytest.raises(ValidationError):
        _transfer_with_vendor_field(sender, recipient, "x" * 256)


def test_vendor_field_serialized(sender, recipient):
    tx = _transfer_with_vendor_field(sender, recipient, "hello").sign(sender)
    raw = tx.serialize(include_signature=False)

    assert raw[58:64] == b"\x05hello"
    assert tx.to_dict()["vendorField"] == "hello"
    assert Transaction.from_dict(tx.to_dict()).verify()


def test_unsupported_type_not_serialized(sender):
    tx = Transaction(
        type=TransactionType.IPFS,
        network=sender.address_prefix,
        nonce=1,
        sender_public_key=sender.public_key,
    )
    with pytest.raises(ValueError):
        tx.serialize()


@pytest.mark.parametrize("tx_type,fee_key", [
    (TransactionType.TRANSFER, "transfer"),
    (TransactionType.SECOND_SIGNATURE, "secondSignature"),
    (TransactionType.DELEGATE_REGISTRATION, "delegateRegistration"),
    (TransactionType.MULTI_PAYMENT, "multiPayment"),
])
def test_fee_key(tx_type, fee_key):
    assert tx_type.fee_key == fee_key
