"""Parameter set for a bridgechain deployment."""

import ipaddress
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import DEFAULT_WIF_PREFIX, MAX_UINT64
from ..errors import ParameterValidationError

IDENTIFIER_PATTERN = re.compile(r"^[a-z][a-z0-9_-]*$")


def to_camel_case(name: str) -> str:
    """snake_case field name to the deployer's camelCase key (``p2p_port`` -> ``p2pPort``)."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _fits_uint64(v: int) -> int:
    if v > MAX_UINT64:
        raise ValueError(f"must not exceed {MAX_UINT64}")
    return v


# Monetary and byte-count values: exact non-negative ints bounded by the uint64 wire format
UInt64 = Annotated[int, Field(ge=0), AfterValidator(_fits_uint64)]


class NetworkType(str, Enum):
    """Base network templates a bridgechain can be cloned from."""
    MAINNET = "mainnet"
    DEVNET = "devnet"
    TESTNET = "testnet"


def _now_epoch() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class _ParameterModel(BaseModel):
    """Shared pydantic configuration: immutable, strict keys, camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel_case,
        populate_by_name=True,
    )


class StaticFees(_ParameterModel):
    """Static fee per transaction type, in the smallest token unit."""
    transfer: UInt64 = 10000000
    second_signature: UInt64 = 500000000
    delegate_registration: UInt64 = 2500000000
    vote: UInt64 = 100000000
    multi_signature: UInt64 = 500000000
    ipfs: UInt64 = 500000000
    multi_payment: UInt64 = 10000000
    delegate_resignation: UInt64 = 2500000000

    def by_type(self) -> Dict[str, int]:
        """Fees keyed by the camelCase transaction type name."""
        return self.model_dump(by_alias=True)


class AddonBytes(_ParameterModel):
    """Per-type addon bytes used by the dynamic fee formula."""
    transfer: UInt64 = 100
    second_signature: UInt64 = 250
    delegate_registration: UInt64 = 400000
    vote: UInt64 = 100
    multi_signature: UInt64 = 500
    ipfs: UInt64 = 250
    multi_payment: UInt64 = 500
    delegate_resignation: UInt64 = 400000

    def by_type(self) -> Dict[str, int]:
        return self.model_dump(by_alias=True)


class DynamicFees(_ParameterModel):
    enabled: bool = False
    min_fee_pool: UInt64 = 3000
    min_fee_broadcast: UInt64 = 3000
    addon_bytes: AddonBytes = Field(default_factory=AddonBytes)


class FeeSchedule(_ParameterModel):
    static: StaticFees = Field(default_factory=StaticFees)
    dynamic: DynamicFees = Field(default_factory=DynamicFees)


class ParameterSet(_ParameterModel):
    """Validated, immutable parameters consumed by every generator stage.

    Field names are snake_case; the camelCase spelling used by the deployer
    ``config.json`` is accepted as an alias.
    """

    # Identity
    network: NetworkType = NetworkType.MAINNET
    chain_name: str = "bridgechain"
    token: str = Field(default="MINE", min_length=1, max_length=16)
    symbol: str = Field(default="M", min_length=1, max_length=8)

    # Key derivation
    address_prefix: int = Field(default=23, ge=0, le=255)
    wif_prefix: int = Field(default=DEFAULT_WIF_PREFIX, ge=0, le=255)

    # Consensus
    forgers: int = Field(default=51, ge=1)
    blocktime: int = Field(default=8, ge=1)
    transactions_per_block: int = Field(default=150, ge=1)
    vendor_field_length: int = Field(default=255, ge=0, le=255)
    epoch: datetime = Field(default_factory=_now_epoch)

    # Economics
    total_premine: UInt64 = 12500000000000000
    reward_height_start: int = Field(default=1, ge=1)
    reward_per_block: UInt64 = 200000000
    fees: FeeSchedule = Field(default_factory=FeeSchedule)

    # Hosts and ports
    core_ip: str = "127.0.0.1"
    p2p_port: int = Field(default=4002, ge=1, le=65535)
    api_port: int = Field(default=4003, ge=1, le=65535)
    webhook_port: int = Field(default=4004, ge=1, le=65535)
    json_rpc_port: int = Field(default=8080, ge=1, le=65535)
    explorer_ip: str = "127.0.0.1"
    explorer_port: int = Field(default=4200, ge=1, le=65535)
    database_host: str = "localhost"
    database_port: int = Field(default=5432, ge=1, le=65535)
    database_name: str = "core_bridgechain"
    peers: List[str] = Field(default_factory=list)

    @field_validator("chain_name")
    @classmethod
    def validate_chain_name(cls, v: str) -> str:
        if not IDENTIFIER_PATTERN.match(v):
            raise ValueError("must be a lowercase identifier (letters, digits, '-' or '_')")
        return v

    @field_validator("total_premine", "reward_per_block", mode="before")
    @classmethod
    def parse_integer_amount(cls, v: Any) -> Any:
        """Accept decimal strings; reject floats so amounts never lose precision."""
        if isinstance(v, bool):
            raise ValueError("must be an integer amount")
        if isinstance(v, float):
            raise ValueError("must be an integer amount, not a float")
        if isinstance(v, str):
            text = v.strip()
            if not text.isdigit():
                raise ValueError("must be a non-negative decimal integer string")
            return int(text)
        return v

    @field_validator("peers", mode="before")
    @classmethod
    def split_peers(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [peer.strip() for peer in v.split(",") if peer.strip()]
        return v

    @field_validator("peers")
    @classmethod
    def validate_peers(cls, v: List[str]) -> List[str]:
        for peer in v:
            ipaddress.ip_address(peer)
        return v

    @field_validator("core_ip", "explorer_ip")
    @classmethod
    def validate_ip(cls, v: str) -> str:
        ipaddress.ip_address(v)
        return v

    @field_validator("epoch")
    @classmethod
    def normalize_epoch(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc).replace(microsecond=0)

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "ParameterSet":
        """Validate raw parameters.

        Raises:
            ParameterValidationError: With one entry per rejected field
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ParameterValidationError.from_pydantic(e) from e

    def with_overrides(self, **overrides: Any) -> "ParameterSet":
        """Return a re-validated copy with the given fields replaced."""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return ParameterSet.parse(data)

    @property
    def explorer_url(self) -> str:
        return f"http://{self.explorer_ip}:{self.explorer_port}"
