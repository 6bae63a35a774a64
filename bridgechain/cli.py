#!/usr/bin/env python3
import json
import sys
from pathlib import Path

import click
import structlog

from .config import (
    BridgechainSettings,
    NetworkType,
    ParameterSet,
    configure_logging,
    load_deployer_config,
    log_error,
)
from .deployer import BridgechainDeployer, TemplateSource
from .errors import BridgechainError, PreconditionError
from .wallet import Wallet

logger = structlog.get_logger()

NETWORKS = [network.value for network in NetworkType]


@click.group()
@click.option("--log-level", default=None, help="Logging level (default from BRIDGECHAIN_LOG_LEVEL)")
@click.option("--log-format", type=click.Choice(["console", "json"]), default=None, help="Log output format")
@click.pass_context
def cli(ctx, log_level, log_format):
    """Bridgechain genesis and network bootstrap generator"""
    settings = BridgechainSettings()
    configure_logging(log_level or settings.log_level, log_format or settings.log_format)
    ctx.obj = settings


@cli.command()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None,
              help="Deployer config.json")
@click.option("--network", type=click.Choice(NETWORKS), default="mainnet", show_default=True,
              help="Base network to clone")
@click.option("--core-path", type=click.Path(file_okay=False), default=None, help="Core checkout holding the templates")
@click.option("--config-root", type=click.Path(file_okay=False), default=None, help="Root for generated configs")
@click.option("--overwrite", is_flag=True, help="Replace an existing generated config")
@click.option("--forgers", type=int, default=None, help="Override the number of forging delegates")
@click.option("--premine", type=str, default=None, help="Override the total premine")
@click.option("--reward-height", type=int, default=None, help="Override the reward activation height")
@click.option("--reward-per-block", type=str, default=None, help="Override the reward per block")
@click.pass_obj
def generate(settings: BridgechainSettings, config_path, network, core_path, config_root, overwrite,
             forgers, premine, reward_height, reward_per_block):
    """Generate genesis and network configuration for a bridgechain"""
    try:
        if config_path:
            params = load_deployer_config(config_path, network)
        else:
            params = ParameterSet.parse({"network": network})
        params = params.with_overrides(
            forgers=forgers,
            total_premine=premine,
            reward_height_start=reward_height,
            reward_per_block=reward_per_block,
        )

        if core_path:
            settings = settings.model_copy(update={"core_path": Path(core_path)})
        if config_root:
            settings = settings.model_copy(update={"config_root": Path(config_root)})

        source = TemplateSource.for_network(settings.core_path, params.network)
        destination = settings.destination_for(params.network.value, params.chain_name)
        result = BridgechainDeployer(params, source, destination).run(overwrite=overwrite)
    except BridgechainError as e:
        log_error(logger, e, {"command": "generate"})
        click.echo(f"Error: {e}", err=True)
        sys.exit(e.exit_code)

    click.echo("\n✓ Bridgechain generated successfully!")
    click.echo(f"Destination: {result.destination}")
    click.echo(f"Nethash: {result.nethash}")
    click.echo(f"Genesis block: {result.block_id}")
    click.echo(f"Genesis address: {result.genesis_address}")
    click.echo(f"Delegates: {result.delegates}")
    if result.misses:
        click.echo(f"Patch rules without a match: {len(result.misses)}")


@cli.command()
@click.option("--network", type=click.Choice(NETWORKS), default="mainnet", show_default=True)
@click.option("--chain-name", required=True, help="Bridgechain name")
@click.option("--config-root", type=click.Path(file_okay=False), default=None, help="Root for generated configs")
@click.pass_obj
def passphrases(settings: BridgechainSettings, network, chain_name, config_root):
    """Print the genesis wallet and delegate passphrases"""
    if config_root:
        settings = settings.model_copy(update={"config_root": Path(config_root)})
    root = settings.destination_for(network, chain_name)

    try:
        with open(root / "genesisWallet.json") as f:
            genesis = json.load(f)
        with open(root / "delegates.json") as f:
            delegates = json.load(f)
    except FileNotFoundError as e:
        error = PreconditionError(f"No generated bridgechain at {root} ({e.filename})")
        log_error(logger, error, {"command": "passphrases"})
        click.echo(f"Error: {error}", err=True)
        sys.exit(error.exit_code)

    click.echo("\nIMPORTANT: Store these passphrases securely!")
    click.echo(f"Genesis address: {genesis['address']}")
    click.echo(f"Genesis passphrase: {genesis['passphrase']}")
    click.echo("\nDelegate passphrases:")
    for index, secret in enumerate(delegates["secrets"], start=1):
        click.echo(f"{index:>3}. {secret}")


def _require_passphrase(ctx, param, value):
    if not value or not value.strip():
        raise click.BadParameter("passphrase must not be empty")
    return value


@cli.command()
@click.argument("passphrase", callback=_require_passphrase)
@click.option("--prefix", type=click.IntRange(0, 255), required=True, help="Address prefix byte")
@click.option("--wif", type=click.IntRange(0, 255), default=170, show_default=True, help="WIF prefix byte")
def address(passphrase, prefix, wif):
    """Derive the address, public key and WIF of a passphrase"""
    wallet = Wallet.from_passphrase(passphrase, prefix, wif)
    click.echo(f"Address: {wallet.address}")
    click.echo(f"Public key: {wallet.public_key}")
    click.echo(f"WIF: {wallet.wif}")


if __name__ == "__main__":
    cli()
