"""
Read-side Proposal Helpers

What a front-end or an execution daemon needs on top of the raw contract
views: derived proposal state, vote percentages, the proposal creator
(recovered from ProposalCreated logs because the ledger does not store it),
and pre-flight checks that explain why a call would revert before it is sent.

All helpers read through a ContractHandle, so they only use the public ABI.
"""

from dataclasses import dataclass

import structlog

from ..chain.errors import ContractRevert
from ..chain.handle import ContractHandle
from ..models.events import ProposalCreated
from ..models.proposal import Proposal, ProposalState
from .dao import CREATOR_STAKE_PERCENT
from .durations import format_ether

logger = structlog.get_logger(__name__)


@dataclass
class VotePercentages:
    """Share of each choice in percent, rounded to one decimal."""

    for_: float = 0.0
    against: float = 0.0
    abstain: float = 0.0


# =============================================================================
# Derived state
# =============================================================================


def proposal_state(proposal: Proposal, now: int) -> ProposalState:
    return proposal.state_at(now)


def is_active(proposal: Proposal, now: int) -> bool:
    """Open for votes: not executed and before the voting deadline."""
    return not proposal.executed and now < proposal.voting_deadline


def time_remaining(proposal: Proposal, now: int) -> int:
    """Seconds until the voting deadline, 0 once it has passed."""
    return max(proposal.voting_deadline - now, 0)


def total_votes(proposal: Proposal) -> int:
    return proposal.total_votes


def vote_percentages(proposal: Proposal) -> VotePercentages:
    total = proposal.total_votes
    if total == 0:
        return VotePercentages()
    return VotePercentages(
        for_=round(proposal.for_votes * 100 / total, 1),
        against=round(proposal.against_votes * 100 / total, 1),
        abstain=round(proposal.abstain_votes * 100 / total, 1),
    )


# =============================================================================
# Contract reads
# =============================================================================


def get_proposal(dao: ContractHandle, proposal_id: int) -> Proposal | None:
    """Fetch a proposal, or None if the id does not exist."""
    try:
        values = dao.call("getProposal", proposal_id)
    except ContractRevert as e:
        logger.debug("proposal_lookup_failed", proposal_id=proposal_id, error=e.name)
        return None
    return Proposal.from_abi_tuple(values)


def list_proposals(dao: ContractHandle) -> list[Proposal]:
    """All proposals in id order."""
    count = dao.call("nextProposalId")
    proposals = []
    for proposal_id in range(1, count + 1):
        proposal = get_proposal(dao, proposal_id)
        if proposal is not None:
            proposals.append(proposal)
    return proposals


def proposal_creator(dao: ContractHandle, proposal_id: int, from_block: int = 0) -> str | None:
    """
    Creator of a proposal from its ProposalCreated event.

    Uses the last matching event; None if there is none.
    """
    logs = dao.chain.get_logs(
        ProposalCreated,
        address=dao.address,
        from_block=from_block,
        proposal_id=proposal_id,
    )
    if not logs:
        return None
    return logs[-1].event.creator


def can_execute_proposal(dao: ContractHandle, proposal_id: int, now: int | None = None) -> bool:
    """
    Whether executeProposal would currently succeed.

    Mirrors the contract's checks: voting ended, safety delay elapsed, FOR
    votes exceed AGAINST votes, not executed and the treasury covers the amount.
    """
    proposal = get_proposal(dao, proposal_id)
    if proposal is None:
        return False
    if now is None:
        now = dao.chain.block_timestamp

    treasury = dao.call("getContractBalance")
    return (
        now >= proposal.voting_deadline
        and now >= proposal.execution_delay
        and proposal.approved
        and not proposal.executed
        and proposal.amount <= treasury
    )


def pre_validate_create_proposal(
    dao: ContractHandle,
    sender: str,
    amount: int,
) -> tuple[bool, list[str]]:
    """
    Check the treasury and stake requirements for createProposal.

    Returns:
        (ok, issues) where issues are human-readable reasons the call would fail
    """
    issues: list[str] = []

    treasury = dao.call("getContractBalance")
    if amount > treasury:
        issues.append("The DAO treasury does not hold enough funds for this amount.")

    total_deposited = dao.call("getTotalDeposited")
    if total_deposited == 0:
        issues.append("The DAO has no deposits yet. Fund it before creating proposals.")
    else:
        required = total_deposited * CREATOR_STAKE_PERCENT // 100
        contribution = dao.call("getUserBalance", sender)
        if contribution < required:
            issues.append(
                f"You need to contribute at least {CREATOR_STAKE_PERCENT}% of the DAO total "
                f"({format_ether(required)} ETH) to create proposals."
            )

    return not issues, issues
