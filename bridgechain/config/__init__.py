"""Bridgechain configuration: parameters, settings and logging."""

from .base import (
    AddonBytes,
    DynamicFees,
    FeeSchedule,
    NetworkType,
    ParameterSet,
    StaticFees,
)
from .loader import load_deployer_config, parameters_from_deployer_config
from .logging import configure_logging, log_error
from .settings import BridgechainSettings

__all__ = [
    "AddonBytes",
    "BridgechainSettings",
    "DynamicFees",
    "FeeSchedule",
    "NetworkType",
    "ParameterSet",
    "StaticFees",
    "configure_logging",
    "load_deployer_config",
    "log_error",
    "parameters_from_deployer_config",
]
