"""Milestone schedule for a new bridgechain.

A milestone overrides protocol parameters from its height onwards. Height 1
carries the full base schedule; every later milestone is a sparse override.
"""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .config.base import ParameterSet, to_camel_case
from .constants import (
    BLOCK_VERSION,
    CORE_FEE_TYPES,
    EXTENDED_FEE_TYPES,
    MULTI_PAYMENT_LIMIT,
    PAYLOAD_BYTES_PER_50_TRANSACTIONS,
)

logger = structlog.get_logger()


class _MilestoneModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel_case, populate_by_name=True)


class BlockLimits(_MilestoneModel):
    version: int = BLOCK_VERSION
    max_transactions: int
    max_payload: int


class MilestoneFees(_MilestoneModel):
    static_fees: Dict[str, int]


class Milestone(_MilestoneModel):
    """Protocol parameters taking effect at ``height``."""

    height: int = Field(ge=1)
    reward: Optional[int] = None
    active_delegates: Optional[int] = None
    blocktime: Optional[int] = None
    block: Optional[BlockLimits] = None
    epoch: Optional[str] = None
    fees: Optional[MilestoneFees] = None
    vendor_field_length: Optional[int] = None
    multi_payment_limit: Optional[int] = None
    aip11: Optional[bool] = None
    htlc_enabled: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def max_payload(max_transactions: int) -> int:
    """Payload byte limit for a block holding ``max_transactions``."""
    return PAYLOAD_BYTES_PER_50_TRANSACTIONS * max_transactions // 50


def format_epoch(params: ParameterSet) -> str:
    return params.epoch.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def compose_milestones(params: ParameterSet) -> List[Milestone]:
    """
    Build the ordered milestone schedule for a parameter set.

    Args:
        params: Validated parameters

    Returns:
        List[Milestone]: Milestones sorted by strictly ascending height
    """
    static_fees = params.fees.static.by_type()
    reward_at_genesis = params.reward_height_start <= 1

    milestones = {
        1: Milestone(
            height=1,
            reward=params.reward_per_block if reward_at_genesis else 0,
            active_delegates=params.forgers,
            blocktime=params.blocktime,
            block=BlockLimits(
                max_transactions=params.transactions_per_block,
                max_payload=max_payload(params.transactions_per_block),
            ),
            epoch=format_epoch(params),
            fees=MilestoneFees(static_fees={name: static_fees[name] for name in CORE_FEE_TYPES}),
            vendor_field_length=params.vendor_field_length,
            multi_payment_limit=MULTI_PAYMENT_LIMIT,
            aip11=False,
            htlc_enabled=False,
        ),
        2: Milestone(
            height=2,
            aip11=True,
            fees=MilestoneFees(static_fees={name: static_fees[name] for name in EXTENDED_FEE_TYPES}),
        ),
    }

    if not reward_at_genesis:
        height = params.reward_height_start
        existing = milestones.get(height)
        if existing is not None:
            # Merge instead of duplicating the height
            milestones[height] = existing.model_copy(update={"reward": params.reward_per_block})
        else:
            milestones[height] = Milestone(height=height, reward=params.reward_per_block)

    schedule = [milestones[height] for height in sorted(milestones)]
    logger.info("milestones_composed",
                heights=[m.height for m in schedule],
                reward_height=params.reward_height_start)
    return schedule


def static_fees(milestones: List[Milestone], height: int = 1) -> Dict[str, int]:
    """Static fee table in effect at ``height``, merging earlier milestones."""
    fees: Dict[str, int] = {}
    for milestone in sorted(milestones, key=lambda m: m.height):
        if milestone.height > height:
            break
        if milestone.fees is not None:
            fees.update(milestone.fees.static_fees)
    return fees


def milestones_to_json(milestones: List[Milestone]) -> List[Dict[str, Any]]:
    return [milestone.to_dict() for milestone in milestones]
