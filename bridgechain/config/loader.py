"""Load deployer ``config.json`` files into a ParameterSet."""

import json
from pathlib import Path
from typing import Any, Dict, Union

import structlog

from ..crypto import prefix_byte_for_character
from ..errors import ParameterValidationError
from .base import NetworkType, ParameterSet

logger = structlog.get_logger()


def _known_keys() -> set:
    keys = set()
    for name, field in ParameterSet.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def parameters_from_deployer_config(raw: Dict[str, Any], network: Union[NetworkType, str]) -> ParameterSet:
    """Build the parameters for one network out of a deployer config document.

    The deployer format keys address prefixes and peer lists per network
    (``mainnetPrefix``, ``devnetPeers`` ...). The prefix is given as the base58
    character addresses should start with, and is converted to a version byte.

    Args:
        raw: Parsed deployer config
        network: Base network the bridgechain is generated for

    Returns:
        ParameterSet: Validated parameters

    Raises:
        ParameterValidationError: If any field is rejected
    """
    try:
        network = NetworkType(network)
    except ValueError:
        raise ParameterValidationError([("network", f"unknown network '{network}'")])

    known = _known_keys()
    data = {key: value for key, value in raw.items() if key in known}
    ignored = sorted(key for key in raw if key not in known)

    # Keys equal to a parameter name except for case are rejected, never ignored
    by_lower = {key.lower(): key for key in known}
    misspelled = [
        (key, f"unknown key; did you mean '{by_lower[key.lower()]}'?")
        for key in ignored
        if key.lower() in by_lower
    ]
    if misspelled:
        raise ParameterValidationError(misspelled)
    if ignored:
        logger.debug("deployer_config_keys_ignored", keys=ignored)

    data["network"] = network.value

    prefix_key = f"{network.value}Prefix"
    if prefix_key in raw and "addressPrefix" not in data and "address_prefix" not in data:
        try:
            data["addressPrefix"] = prefix_byte_for_character(str(raw[prefix_key]))
        except ValueError as e:
            raise ParameterValidationError([(prefix_key, str(e))])

    peers_key = f"{network.value}Peers"
    if peers_key in raw and "peers" not in data:
        data["peers"] = raw[peers_key]

    if "explorerIp" not in data and "coreIp" in data:
        data["explorerIp"] = data["coreIp"]

    return ParameterSet.parse(data)


def load_deployer_config(path: Union[str, Path], network: Union[NetworkType, str]) -> ParameterSet:
    """Read a deployer config file and return the parameters for ``network``."""
    path = Path(path).expanduser()
    try:
        with open(path) as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise ParameterValidationError([("config", f"file not found: {path}")])
    except json.JSONDecodeError as e:
        raise ParameterValidationError([("config", f"invalid JSON: {e}")])

    if not isinstance(raw, dict):
        raise ParameterValidationError([("config", "top-level value must be an object")])

    logger.info("deployer_config_loaded", path=str(path), network=str(network))
    return parameters_from_deployer_config(raw, network)
