import struct
from enum import IntEnum
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .config.base import UInt64
from .constants import CORE_TYPE_GROUP, TRANSACTION_HEADER, TRANSACTION_VERSION
from .crypto import decode_address, sha256, verify_signature
from .wallet import Wallet

logger = structlog.get_logger()


class TransactionType(IntEnum):
    TRANSFER = 0
    SECOND_SIGNATURE = 1
    DELEGATE_REGISTRATION = 2
    VOTE = 3
    MULTI_SIGNATURE = 4
    IPFS = 5
    MULTI_PAYMENT = 6
    DELEGATE_RESIGNATION = 7

    @property
    def fee_key(self) -> str:
        """camelCase name used by the static fee table"""
        head, *rest = self.name.lower().split("_")
        return head + "".join(part.title() for part in rest)


class Transaction(BaseModel):
    """A typed, signed genesis transaction."""

    type: TransactionType
    network: int = Field(..., ge=0, le=255)
    type_group: int = CORE_TYPE_GROUP
    nonce: UInt64
    sender_public_key: str
    fee: UInt64 = 0
    amount: UInt64 = 0
    recipient_id: Optional[str] = None
    expiration: int = 0
    vendor_field: Optional[str] = None
    asset: Optional[Dict[str, Any]] = None
    signature: Optional[str] = None
    id: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra='forbid')

    @field_validator('vendor_field')
    @classmethod
    def validate_vendor_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.encode('utf-8')) > 255:
            raise ValueError("Vendor field exceeds 255 bytes")
        return v

    def serialize(self, include_signature: bool = True) -> bytes:
        """
        Serialize the transaction to its canonical little-endian byte form.

        Args:
            include_signature: Append the DER signature when present

        Returns:
            bytes: Serialized transaction
        """
        buffer = bytearray()
        buffer += struct.pack('<BBB', TRANSACTION_HEADER, TRANSACTION_VERSION, self.network)
        buffer += struct.pack('<IHQ', self.type_group, int(self.type), self.nonce)
        buffer += bytes.fromhex(self.sender_public_key)
        buffer += struct.pack('<Q', self.fee)

        vendor_field = (self.vendor_field or '').encode('utf-8')
        buffer += struct.pack('<B', len(vendor_field)) + vendor_field

        buffer += self._serialize_asset()

        if include_signature and self.signature:
            buffer += bytes.fromhex(self.signature)
        return bytes(buffer)

    def _serialize_asset(self) -> bytes:
        if self.type == TransactionType.TRANSFER:
            if not self.recipient_id:
                raise ValueError("Transfer requires a recipient")
            return struct.pack('<QI', self.amount, self.expiration) + decode_address(self.recipient_id)

        if self.type == TransactionType.DELEGATE_REGISTRATION:
            username = self.asset['delegate']['username'].encode('utf-8')
            return struct.pack('<B', len(username)) + username

        if self.type == TransactionType.VOTE:
            votes = self.asset['votes']
            buffer = bytearray(struct.pack('<B', len(votes)))
            for vote in votes:
                buffer += struct.pack('<B', 1 if vote.startswith('+') else 0)
                buffer += bytes.fromhex(vote[1:])
            return bytes(buffer)

        raise ValueError(f"Serialization of {self.type.name} transactions is not supported")

    def signing_digest(self) -> bytes:
        return sha256(self.serialize(include_signature=False))

    def compute_id(self) -> str:
        return sha256(self.serialize()).hex()

    def sign(self, wallet: Wallet) -> "Transaction":
        """
        Sign with the sender's wallet.

        Returns:
            Transaction: A signed copy with its id set
        """
        if wallet.public_key != self.sender_public_key:
            raise ValueError("Wallet does not own the sender public key")
        signed = self.model_copy(update={'signature': wallet.sign(self.signing_digest())})
        return signed.model_copy(update={'id': signed.compute_id()})

    def verify(self) -> bool:
        """Check the signature and the id against the transaction contents."""
        if not self.signature:
            return False
        if self.id is not None and self.id != self.compute_id():
            return False
        return verify_signature(
            bytes.fromhex(self.sender_public_key),
            bytes.fromhex(self.signature),
            self.signing_digest(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON form; amounts are decimal strings to keep full precision."""
        data: Dict[str, Any] = {
            'id': self.id,
            'version': TRANSACTION_VERSION,
            'network': self.network,
            'typeGroup': self.type_group,
            'type': int(self.type),
            'nonce': str(self.nonce),
            'senderPublicKey': self.sender_public_key,
            'fee': str(self.fee),
            'amount': str(self.amount),
        }
        if self.recipient_id is not None:
            data['recipientId'] = self.recipient_id
        if self.type == TransactionType.TRANSFER:
            data['expiration'] = self.expiration
        if self.vendor_field:
            data['vendorField'] = self.vendor_field
        if self.asset is not None:
            data['asset'] = self.asset
        data['signature'] = self.signature
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """Rebuild a transaction from its JSON form."""
        return cls(
            type=TransactionType(int(data['type'])),
            network=int(data['network']),
            type_group=int(data.get('typeGroup', CORE_TYPE_GROUP)),
            nonce=int(data['nonce']),
            sender_public_key=data['senderPublicKey'],
            fee=int(data.get('fee', 0)),
            amount=int(data.get('amount', 0)),
            recipient_id=data.get('recipientId'),
            expiration=int(data.get('expiration', 0)),
            vendor_field=data.get('vendorField'),
            asset=data.get('asset'),
            signature=data.get('signature'),
            id=data.get('id'),
        )


def build_transfer(sender: Wallet, recipient_id: str, amount: int, fee: int, nonce: int) -> Transaction:
    """Build and sign a transfer"""
    tx = Transaction(
        type=TransactionType.TRANSFER,
        network=sender.address_prefix,
        nonce=nonce,
        sender_public_key=sender.public_key,
        fee=fee,
        amount=amount,
        recipient_id=recipient_id,
    )
    return tx.sign(sender)


def build_delegate_registration(sender: Wallet, username: str, fee: int, nonce: int) -> Transaction:
    """Build and sign a delegate registration for the sender"""
    tx = Transaction(
        type=TransactionType.DELEGATE_REGISTRATION,
        network=sender.address_prefix,
        nonce=nonce,
        sender_public_key=sender.public_key,
        fee=fee,
        asset={'delegate': {'username': username}},
    )
    return tx.sign(sender)


def build_vote(sender: Wallet, delegate_public_keys: List[str], fee: int, nonce: int) -> Transaction:
    """Build and sign a vote for one or more delegates"""
    tx = Transaction(
        type=TransactionType.VOTE,
        network=sender.address_prefix,
        nonce=nonce,
        sender_public_key=sender.public_key,
        fee=fee,
        recipient_id=sender.address,
        asset={'votes': [f"+{public_key}" for public_key in delegate_public_keys]},
    )
    return tx.sign(sender)
