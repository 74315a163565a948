"""
Ledger Events

Events are what indexers and the front-end read to reconstruct state without
replaying every call. Fields marked `indexed` in INDEXED_FIELDS are the ones
`LocalChain.get_logs` filters can match on.
"""

from typing import ClassVar

from pydantic import ConfigDict

from .base import Address, DAOBaseModel, Uint256, VoteType


class ContractEvent(DAOBaseModel):
    """Base class for events emitted by contracts."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def event_name(cls) -> str:
        return cls.__name__


class FundsDeposited(ContractEvent):
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("contributor",)

    contributor: Address
    amount: Uint256


class ProposalCreated(ContractEvent):
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("proposal_id", "creator", "recipient")

    proposal_id: int
    creator: Address
    recipient: Address
    amount: Uint256
    voting_deadline: int
    description: str


class VoteCast(ContractEvent):
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("proposal_id", "voter")

    proposal_id: int
    voter: Address
    vote_type: VoteType


class VoteChanged(ContractEvent):
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("proposal_id", "voter")

    proposal_id: int
    voter: Address
    old_vote: VoteType
    new_vote: VoteType


class ProposalExecuted(ContractEvent):
    INDEXED_FIELDS: ClassVar[tuple[str, ...]] = ("proposal_id", "recipient")

    proposal_id: int
    recipient: Address
    amount: Uint256
