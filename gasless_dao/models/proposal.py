"""
Proposal and Vote Models

A proposal asks the treasury to pay `amount` to `recipient`. It is created
once, its tallies move while voting is open, and it becomes immutable after
execution. The creator is not stored; it is only recoverable from
the ProposalCreated event.
"""

from enum import Enum

from pydantic import Field

from .base import Address, DAOBaseModel, Uint256, VoteType


class ProposalState(str, Enum):
    """
    Derived lifecycle position of a proposal at a given timestamp.

    VOTING -> AWAITING_DELAY -> EXECUTABLE -> EXECUTED

    A proposal that fails its tally stays EXECUTABLE; executeProposal keeps
    reverting with NotApproved.
    """

    VOTING = "voting"
    AWAITING_DELAY = "awaiting_delay"
    EXECUTABLE = "executable"
    EXECUTED = "executed"


class Proposal(DAOBaseModel):
    """A treasury transfer proposal."""

    id: int = Field(ge=1)
    recipient: Address
    amount: Uint256
    voting_deadline: int = Field(alias="votingDeadline")
    execution_delay: int = Field(
        alias="executionDelay",
        description="Timestamp from which execution is allowed (deadline + safety delay)",
    )
    executed: bool = False
    for_votes: int = Field(default=0, alias="forVotes")
    against_votes: int = Field(default=0, alias="againstVotes")
    abstain_votes: int = Field(default=0, alias="abstainVotes")
    description: str = ""

    @property
    def execution_unlock_time(self) -> int:
        return self.execution_delay

    @property
    def total_votes(self) -> int:
        return self.for_votes + self.against_votes + self.abstain_votes

    @property
    def approved(self) -> bool:
        return self.for_votes > self.against_votes

    def state_at(self, now: int) -> ProposalState:
        if self.executed:
            return ProposalState.EXECUTED
        if now < self.voting_deadline:
            return ProposalState.VOTING
        if now < self.execution_delay:
            return ProposalState.AWAITING_DELAY
        return ProposalState.EXECUTABLE

    def as_abi_tuple(self) -> tuple:
        return (
            self.id,
            self.recipient,
            self.amount,
            self.voting_deadline,
            self.execution_delay,
            self.executed,
            self.for_votes,
            self.against_votes,
            self.abstain_votes,
            self.description,
        )

    @classmethod
    def from_abi_tuple(cls, values: tuple) -> "Proposal":
        fields = (
            "id",
            "recipient",
            "amount",
            "voting_deadline",
            "execution_delay",
            "executed",
            "for_votes",
            "against_votes",
            "abstain_votes",
            "description",
        )
        return cls(**dict(zip(fields, values)))

    def add_vote(self, choice: VoteType) -> None:
        if choice == VoteType.FOR:
            self.for_votes += 1
        elif choice == VoteType.AGAINST:
            self.against_votes += 1
        else:
            self.abstain_votes += 1

    def remove_vote(self, choice: VoteType) -> None:
        if choice == VoteType.FOR:
            self.for_votes -= 1
        elif choice == VoteType.AGAINST:
            self.against_votes -= 1
        else:
            self.abstain_votes -= 1


class VoteRecord(DAOBaseModel):
    """A voter's standing ballot on one proposal."""

    has_voted: bool = Field(default=False, alias="hasVoted")
    choice: VoteType = VoteType.ABSTAIN

    def as_abi_tuple(self) -> tuple[bool, int]:
        return (self.has_voted, int(self.choice))
