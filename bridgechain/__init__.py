"""Bridgechain genesis and network bootstrap generator."""

from .block import GenesisBlock, assemble_genesis_block, compute_payload_hash
from .config import NetworkType, ParameterSet
from .deployer import BridgechainDeployer, DeployResult, TemplateSource
from .errors import (
    BridgechainError,
    EntropyFailure,
    GenesisError,
    ParameterValidationError,
    PatchRuleMiss,
    PreconditionError,
)
from .genesis import assemble_genesis_transactions, split_premine
from .milestones import Milestone, compose_milestones
from .network import NetworkConfig, NetworkDraft, compose_network
from .wallet import Wallet, derive_wallets

__version__ = "0.1.0"

__all__ = [
    "BridgechainDeployer",
    "BridgechainError",
    "DeployResult",
    "EntropyFailure",
    "GenesisBlock",
    "GenesisError",
    "Milestone",
    "NetworkConfig",
    "NetworkDraft",
    "NetworkType",
    "ParameterSet",
    "ParameterValidationError",
    "PatchRuleMiss",
    "PreconditionError",
    "TemplateSource",
    "Wallet",
    "assemble_genesis_block",
    "assemble_genesis_transactions",
    "compose_milestones",
    "compose_network",
    "compute_payload_hash",
    "derive_wallets",
    "split_premine",
]
