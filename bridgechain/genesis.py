"""Genesis transaction set: fund, register and self-vote every delegate."""

from typing import List

import structlog

from .config.base import ParameterSet
from .constants import DELEGATE_USERNAME_PREFIX
from .errors import GenesisError
from .milestones import Milestone, static_fees
from .transaction import (
    Transaction,
    TransactionType,
    build_delegate_registration,
    build_transfer,
    build_vote,
)
from .wallet import Wallet

logger = structlog.get_logger()

# The genesis wallet distributes the whole premine; there is no forger to collect fees.
GENESIS_TRANSFER_FEE = 0


def split_premine(total: int, count: int) -> List[int]:
    """
    Split the premine evenly across delegates.

    The remainder of the integer division goes to the last delegate, so the
    parts always sum to ``total`` exactly.

    Args:
        total: Total premine in the smallest token unit
        count: Number of delegates

    Returns:
        List[int]: One amount per delegate
    """
    if count < 1:
        raise ValueError("Cannot split the premine across zero delegates")
    share, remainder = divmod(total, count)
    amounts = [share] * count
    amounts[-1] += remainder
    return amounts


def delegate_username(index: int) -> str:
    return f"{DELEGATE_USERNAME_PREFIX}{index + 1}"


def assemble_genesis_transactions(genesis_wallet: Wallet, delegates: List[Wallet],
                                  params: ParameterSet, milestones: List[Milestone]) -> List[Transaction]:
    """
    Build the signed genesis transactions in block order.

    Layout is fund (one transfer per delegate) then register (one delegate
    registration each) then vote (one self-vote each).

    Args:
        genesis_wallet: Wallet holding the premine
        delegates: Delegate wallets, in username order
        params: Validated parameters
        milestones: Schedule supplying the height-1 static fees

    Returns:
        List[Transaction]: Signed transactions
    """
    fees = static_fees(milestones, height=1)
    registration_fee = fees[TransactionType.DELEGATE_REGISTRATION.fee_key]
    vote_fee = fees[TransactionType.VOTE.fee_key]
    amounts = split_premine(params.total_premine, len(delegates))

    transfers = [
        build_transfer(genesis_wallet, delegate.address, amount, GENESIS_TRANSFER_FEE, nonce=index + 1)
        for index, (delegate, amount) in enumerate(zip(delegates, amounts))
    ]
    registrations = [
        build_delegate_registration(delegate, delegate_username(index), registration_fee, nonce=1)
        for index, delegate in enumerate(delegates)
    ]
    votes = [
        build_vote(delegate, [delegate.public_key], vote_fee, nonce=2)
        for delegate in delegates
    ]

    for delegate, amount in zip(delegates, amounts):
        if amount < registration_fee + vote_fee:
            logger.warning("delegate_underfunded",
                           address=delegate.address,
                           funded=str(amount),
                           required=str(registration_fee + vote_fee))

    transactions = transfers + registrations + votes
    verify_closed_system(transactions, genesis_wallet, params.total_premine)

    logger.info("genesis_transactions_assembled",
                transfers=len(transfers),
                registrations=len(registrations),
                votes=len(votes))
    return transactions


def verify_closed_system(transactions: List[Transaction], genesis_wallet: Wallet, premine: int) -> None:
    """
    Check the genesis wallet never spends more than the premine it holds.

    Raises:
        GenesisError: If outgoing amounts plus fees exceed the premine
    """
    spent = sum(
        tx.amount + tx.fee
        for tx in transactions
        if tx.sender_public_key == genesis_wallet.public_key
    )
    if spent > premine:
        raise GenesisError(f"Genesis wallet spends {spent}, more than the premine of {premine}")
