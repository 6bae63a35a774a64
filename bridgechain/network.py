"""Network descriptor and peer list for a bridgechain.

The descriptor is built in two steps. ``compose_network`` returns a frozen
``NetworkDraft`` holding everything known before the genesis block exists;
``NetworkDraft.stamp`` then returns a new ``NetworkConfig`` carrying the
nethash. The draft is never mutated, so a nethash cannot be attached to
parameters other than the ones the block was assembled with.
"""

import re
from typing import Any, Dict, List

import structlog
from pydantic import BaseModel, ConfigDict

from .config.base import ParameterSet

logger = structlog.get_logger()

NETHASH_PATTERN = re.compile(r"^[0-9a-f]{64}$")

EXCEPTIONS_SKELETON: Dict[str, Any] = {
    "blocks": [],
    "transactions": [],
    "outlookTable": {},
    "transactionIdFixTable": {},
}


class ClientInfo(BaseModel):
    token: str
    symbol: str
    explorer: str

    model_config = ConfigDict(frozen=True)


class NetworkDraft(BaseModel):
    """Network descriptor before the genesis block is known."""

    name: str
    message_prefix: str
    pub_key_hash: int
    wif: int
    client: ClientInfo

    model_config = ConfigDict(frozen=True)

    def stamp(self, nethash: str) -> "NetworkConfig":
        """Attach the genesis nethash, returning the final descriptor."""
        if not NETHASH_PATTERN.match(nethash or ""):
            raise ValueError(f"Invalid nethash: {nethash!r}")
        return NetworkConfig(**self.model_dump(), nethash=nethash)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "messagePrefix": self.message_prefix,
            "pubKeyHash": self.pub_key_hash,
            "wif": self.wif,
            "client": self.client.model_dump(),
        }


class NetworkConfig(NetworkDraft):
    """Network descriptor identified by the genesis payload hash."""

    nethash: str

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["nethash"] = self.nethash
        return data


def compose_network(params: ParameterSet) -> NetworkDraft:
    """Build the provisional network descriptor from the parameters."""
    draft = NetworkDraft(
        name=params.network.value,
        message_prefix=f"{params.chain_name} message:\n",
        pub_key_hash=params.address_prefix,
        wif=params.wif_prefix,
        client=ClientInfo(
            token=params.token,
            symbol=params.symbol,
            explorer=params.explorer_url,
        ),
    )
    logger.info("network_draft_composed", name=draft.name, pub_key_hash=draft.pub_key_hash)
    return draft


def compose_peers(params: ParameterSet) -> Dict[str, List[Any]]:
    """Seed peer list, every peer on the configured P2P port."""
    return {
        "list": [{"ip": ip, "port": params.p2p_port} for ip in params.peers],
        "sources": [],
    }
