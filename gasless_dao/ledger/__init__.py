"""
Voting Ledger Package

DAOVoting holds the treasury, proposals and votes. The read-side helpers in
`views` and `durations` serve front-ends and execution daemons.
"""

from .context import ERC2771Context, resolve_caller
from .dao import (
    CREATOR_STAKE_PERCENT,
    DAO_VOTING_ABI,
    DEFAULT_MINIMUM_VOTING_BALANCE,
    PROPOSAL_COMPONENTS,
    SAFETY_DELAY,
    DAOVoting,
)
from .durations import format_duration, format_ether, parse_ether, to_seconds
from .errors import (
    AlreadyExecuted,
    EmptyTreasury,
    ExecutionDelayNotElapsed,
    InsufficientCreatorStake,
    InsufficientTreasuryFunds,
    InsufficientVotingStake,
    InvalidAmount,
    InvalidDuration,
    InvalidRecipient,
    InvalidVoteType,
    NotApproved,
    ProposalNotFound,
    TransferFailed,
    VotingClosed,
    VotingNotEnded,
    ZeroAmount,
)
from .views import (
    VotePercentages,
    can_execute_proposal,
    get_proposal,
    is_active,
    list_proposals,
    pre_validate_create_proposal,
    proposal_creator,
    proposal_state,
    time_remaining,
    total_votes,
    vote_percentages,
)

__all__ = [
    # Contract
    "CREATOR_STAKE_PERCENT",
    "DAO_VOTING_ABI",
    "DEFAULT_MINIMUM_VOTING_BALANCE",
    "PROPOSAL_COMPONENTS",
    "SAFETY_DELAY",
    "DAOVoting",
    "ERC2771Context",
    "resolve_caller",
    # Errors
    "AlreadyExecuted",
    "EmptyTreasury",
    "ExecutionDelayNotElapsed",
    "InsufficientCreatorStake",
    "InsufficientTreasuryFunds",
    "InsufficientVotingStake",
    "InvalidAmount",
    "InvalidDuration",
    "InvalidRecipient",
    "InvalidVoteType",
    "NotApproved",
    "ProposalNotFound",
    "TransferFailed",
    "VotingClosed",
    "VotingNotEnded",
    "ZeroAmount",
    # Views
    "VotePercentages",
    "can_execute_proposal",
    "get_proposal",
    "is_active",
    "list_proposals",
    "pre_validate_create_proposal",
    "proposal_creator",
    "proposal_state",
    "time_remaining",
    "total_votes",
    "vote_percentages",
    # Formatting
    "format_duration",
    "format_ether",
    "parse_ether",
    "to_seconds",
]
