import struct
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    BLOCK_VERSION,
    GENESIS_HEIGHT,
    GENESIS_TIMESTAMP,
    MAX_UINT64,
    PREVIOUS_BLOCK_SENTINEL,
)
from .crypto import sha256, verify_signature
from .errors import GenesisError
from .transaction import Transaction
from .wallet import Wallet

logger = structlog.get_logger()


def compute_payload(transactions: List[Transaction]) -> bytes:
    """Concatenated serialized transactions in block order."""
    return b"".join(tx.serialize() for tx in transactions)


def compute_payload_hash(transactions: List[Transaction]) -> str:
    """sha256 over the serialized transactions; becomes the network nethash."""
    return sha256(compute_payload(transactions)).hex()


class GenesisBlock(BaseModel):
    """The height-1 block with no predecessor."""

    version: int = BLOCK_VERSION
    height: int = GENESIS_HEIGHT
    previous_block: Optional[str] = None
    timestamp: int = GENESIS_TIMESTAMP
    number_of_transactions: int
    total_amount: int = Field(ge=0)
    total_fee: int = Field(ge=0)
    reward: int = 0
    payload_length: int
    payload_hash: str
    generator_public_key: str
    block_signature: Optional[str] = None
    id: Optional[str] = None
    transactions: List[Transaction] = []

    model_config = ConfigDict(frozen=True)

    def serialize_header(self, include_signature: bool = True) -> bytes:
        """
        Serialize the block header.

        Amounts are packed as uint64; the previous block is an 8-byte zero
        sentinel for the genesis block.
        """
        for name, value in (("totalAmount", self.total_amount), ("totalFee", self.total_fee)):
            if value > MAX_UINT64:
                raise GenesisError(f"{name} {value} does not fit the block header")

        buffer = bytearray()
        buffer += struct.pack("<III", self.version, self.timestamp, self.height)
        buffer += PREVIOUS_BLOCK_SENTINEL
        buffer += struct.pack("<I", self.number_of_transactions)
        buffer += struct.pack("<QQQ", self.total_amount, self.total_fee, self.reward)
        buffer += struct.pack("<I", self.payload_length)
        buffer += bytes.fromhex(self.payload_hash)
        buffer += bytes.fromhex(self.generator_public_key)
        if include_signature and self.block_signature:
            buffer += bytes.fromhex(self.block_signature)
        return bytes(buffer)

    def compute_id(self) -> str:
        return sha256(self.serialize_header()).hex()

    def sign(self, wallet: Wallet) -> "GenesisBlock":
        """Sign the header and derive the block id; returns a new block."""
        if wallet.public_key != self.generator_public_key:
            raise ValueError("Wallet does not own the generator public key")
        signature = wallet.sign(sha256(self.serialize_header(include_signature=False)))
        signed = self.model_copy(update={"block_signature": signature})
        return signed.model_copy(update={"id": signed.compute_id()})

    def verify(self) -> bool:
        """Re-derive payload hash, totals and id, then check the signature."""
        if not self.block_signature:
            return False
        if compute_payload_hash(self.transactions) != self.payload_hash:
            return False
        if self.number_of_transactions != len(self.transactions):
            return False
        if self.id != self.compute_id():
            return False
        return verify_signature(
            bytes.fromhex(self.generator_public_key),
            bytes.fromhex(self.block_signature),
            sha256(self.serialize_header(include_signature=False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "height": self.height,
            "previousBlock": self.previous_block,
            "timestamp": self.timestamp,
            "numberOfTransactions": self.number_of_transactions,
            "totalAmount": str(self.total_amount),
            "totalFee": str(self.total_fee),
            "reward": str(self.reward),
            "payloadLength": self.payload_length,
            "payloadHash": self.payload_hash,
            "generatorPublicKey": self.generator_public_key,
            "blockSignature": self.block_signature,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenesisBlock":
        return cls(
            version=int(data["version"]),
            height=int(data["height"]),
            previous_block=data.get("previousBlock"),
            timestamp=int(data["timestamp"]),
            number_of_transactions=int(data["numberOfTransactions"]),
            total_amount=int(data["totalAmount"]),
            total_fee=int(data["totalFee"]),
            reward=int(data["reward"]),
            payload_length=int(data["payloadLength"]),
            payload_hash=data["payloadHash"],
            generator_public_key=data["generatorPublicKey"],
            block_signature=data.get("blockSignature"),
            id=data.get("id"),
            transactions=[Transaction.from_dict(tx) for tx in data.get("transactions", [])],
        )


def assemble_genesis_block(transactions: List[Transaction], genesis_wallet: Wallet) -> GenesisBlock:
    """
    Assemble and sign the genesis block.

    Args:
        transactions: Signed transactions in block order
        genesis_wallet: Wallet that generates and signs the block

    Returns:
        GenesisBlock: Signed block with payload hash and id
    """
    payload = compute_payload(transactions)
    block = GenesisBlock(
        number_of_transactions=len(transactions),
        total_amount=sum(tx.amount for tx in transactions),
        total_fee=sum(tx.fee for tx in transactions),
        payload_length=len(payload),
        payload_hash=sha256(payload).hex(),
        generator_public_key=genesis_wallet.public_key,
        transactions=transactions,
    ).sign(genesis_wallet)

    logger.info("genesis_block_assembled",
                block_id=block.id,
                payload_hash=block.payload_hash,
                transactions=block.number_of_transactions,
                total_amount=str(block.total_amount))
    return block
