"""End-to-end bridgechain generation pipeline."""

from pathlib import Path
from typing import List, NamedTuple, Union

import structlog

from .block import assemble_genesis_block
from .config.base import NetworkType, ParameterSet
from .constants import CORE_DIR, CRYPTO_DIR, ENV_FILE, PLUGINS_FILE
from .errors import PatchRuleMiss, PreconditionError
from .genesis import assemble_genesis_transactions
from .milestones import compose_milestones, milestones_to_json
from .network import EXCEPTIONS_SKELETON, compose_network, compose_peers
from .patcher import PatchResult, patch_env, patch_plugins
from .wallet import derive_wallets
from .writer import ArtifactWriter

logger = structlog.get_logger()


class TemplateSource:
    """The two template roots of a base network inside a core checkout."""

    def __init__(self, core_config: Union[str, Path], crypto_config: Union[str, Path]):
        self.core_config = Path(core_config).expanduser()
        self.crypto_config = Path(crypto_config).expanduser()

    @classmethod
    def for_network(cls, core_path: Union[str, Path], network: Union[NetworkType, str]) -> "TemplateSource":
        network = NetworkType(network).value
        core_path = Path(core_path).expanduser()
        return cls(
            core_path / "packages" / "core" / "bin" / "config" / network,
            core_path / "packages" / "crypto" / "src" / "networks" / network,
        )

    def check(self) -> None:
        """
        Raises:
            PreconditionError: If either template root is missing
        """
        for root in (self.core_config, self.crypto_config):
            if not root.is_dir():
                raise PreconditionError(f"Base network template not found: {root}")


class DeployResult(NamedTuple):
    destination: Path
    nethash: str
    block_id: str
    genesis_address: str
    delegates: int
    misses: List[PatchRuleMiss]


class BridgechainDeployer:
    """Runs the generator pipeline for one parameter set.

    Args:
        params: Validated parameters
        source: Base network templates to copy
        destination: Root the generated configuration is written to
    """

    def __init__(self, params: ParameterSet, source: TemplateSource, destination: Union[str, Path]):
        self.params = params
        self.source = source
        self.writer = ArtifactWriter(destination)

    def check(self, overwrite: bool = False) -> None:
        """
        Run every precondition without mutating the filesystem.

        Raises:
            PreconditionError: If a template root is missing, overlaps the
                destination, or the destination exists without overwrite
        """
        self.source.check()
        destination = self.writer.root.resolve()
        for root in (self.source.core_config, self.source.crypto_config):
            root = root.resolve()
            if destination == root or destination in root.parents or root in destination.parents:
                raise PreconditionError(
                    f"Destination {destination} overlaps the base network template {root}"
                )
        self.writer.check(overwrite)

    def run(self, overwrite: bool = False) -> DeployResult:
        """
        Generate and persist every artifact.

        The genesis state is assembled in memory first, so a precondition or
        entropy failure leaves the destination untouched. A failure while
        writing leaves a partial destination that must be regenerated with
        ``overwrite``.

        Returns:
            DeployResult: Summary of the generated network
        """
        params = self.params
        log = logger.bind(network=params.network.value, chain=params.chain_name)

        self.check(overwrite)

        milestones = compose_milestones(params)
        draft = compose_network(params)
        genesis_wallet, delegates = derive_wallets(params.forgers, draft.pub_key_hash, draft.wif)
        transactions = assemble_genesis_transactions(genesis_wallet, delegates, params, milestones)
        block = assemble_genesis_block(transactions, genesis_wallet)
        network = draft.stamp(block.payload_hash)

        self.writer.prepare(overwrite)

        self.writer.copy_tree(self.source.core_config, CORE_DIR)
        self.writer.copy_tree(self.source.crypto_config, CRYPTO_DIR)

        self.writer.write_json(f"{CRYPTO_DIR}/milestones.json", milestones_to_json(milestones))
        self.writer.write_json(f"{CRYPTO_DIR}/exceptions.json", EXCEPTIONS_SKELETON)
        self.writer.write_json(f"{CRYPTO_DIR}/genesisBlock.json", block.to_dict())
        self.writer.write_json(f"{CRYPTO_DIR}/network.json", network.to_dict())
        self.writer.write_json(f"{CORE_DIR}/peers.json", compose_peers(params))

        misses = []
        misses += self._patch(f"{CORE_DIR}/{PLUGINS_FILE}", patch_plugins)
        misses += self._patch(f"{CORE_DIR}/{ENV_FILE}", patch_env)

        self.writer.write_json(
            "genesisWallet.json",
            {"address": genesis_wallet.address, "passphrase": genesis_wallet.passphrase},
            sensitive=True,
        )
        self.writer.write_json(
            "delegates.json",
            {"secrets": [delegate.passphrase for delegate in delegates]},
            sensitive=True,
        )

        log.info("bridgechain_generated",
                 destination=str(self.writer.root),
                 nethash=network.nethash,
                 block_id=block.id,
                 patch_misses=len(misses))
        return DeployResult(
            destination=self.writer.root,
            nethash=network.nethash,
            block_id=block.id,
            genesis_address=genesis_wallet.address,
            delegates=len(delegates),
            misses=misses,
        )

    def _patch(self, relpath: str, patcher) -> List[PatchRuleMiss]:
        if not self.writer.path(relpath).is_file():
            logger.warning("template_file_missing", path=relpath)
            return [PatchRuleMiss(relpath, "<file missing>")]
        result: PatchResult = patcher(self.writer.read_text(relpath), self.params)
        self.writer.write_text(relpath, result.text)
        return result.misses
