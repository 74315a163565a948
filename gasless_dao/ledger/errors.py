"""
Voting Ledger Errors

Every precondition failure of DAOVoting is a named ContractRevert, raised
before any state is touched. The ledger rolls the whole call back, so a
failed call never leaves a partial update behind.
"""

from ..chain.errors import ContractRevert


# Funding


class ZeroAmount(ContractRevert):
    """fundDAO was called without value."""
    pass


# Proposal creation


class InvalidRecipient(ContractRevert):
    """Recipient is the zero address."""
    pass


class InvalidAmount(ContractRevert):
    """Requested amount is zero."""
    pass


class InvalidDuration(ContractRevert):
    """Voting duration is zero."""
    pass


class EmptyTreasury(ContractRevert):
    """Nothing has been deposited yet."""
    pass


class InsufficientCreatorStake(ContractRevert):
    """Creator contributed less than 10% of the total deposited."""
    pass


class InsufficientTreasuryFunds(ContractRevert):
    """The DAO's actual balance cannot cover the amount."""
    pass


# Voting


class ProposalNotFound(ContractRevert):
    pass


class VotingClosed(ContractRevert):
    """The voting deadline has passed."""
    pass


class AlreadyExecuted(ContractRevert):
    pass


class InsufficientVotingStake(ContractRevert):
    """Voter contributed less than the minimum voting balance."""
    pass


class InvalidVoteType(ContractRevert):
    """Choice is not ABSTAIN, FOR or AGAINST."""
    pass


# Execution


class VotingNotEnded(ContractRevert):
    pass


class ExecutionDelayNotElapsed(ContractRevert):
    """The safety delay after the voting deadline is still running."""
    pass


class NotApproved(ContractRevert):
    """FOR votes do not exceed AGAINST votes."""
    pass


class TransferFailed(ContractRevert):
    """The payout to the recipient reverted."""
    pass
