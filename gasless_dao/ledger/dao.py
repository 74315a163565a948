"""
DAOVoting - Contribution, Proposal, Vote and Execution Ledger

Contributors fund a shared treasury, propose payouts from it, vote on them and
execute approved payouts once voting has closed and a one-day safety delay has
passed. Every entry point resolves its caller through the trusted forwarder,
so each action can be sent directly or gaslessly.

Proposal lifecycle:
    created -> voting (now < votingDeadline)
            -> awaiting delay (votingDeadline <= now < executionDelay)
            -> executable (now >= executionDelay, decided by the tally)
            -> executed (terminal)

There is no rejected state: a proposal whose tally fails keeps failing
executeProposal with NotApproved.
"""

from typing import Any

import structlog

from ..chain.contract import ReentrancyGuard, non_reentrant
from ..models.base import ZERO_ADDRESS, VoteType, normalize_address
from ..models.events import (
    FundsDeposited,
    ProposalCreated,
    ProposalExecuted,
    VoteCast,
    VoteChanged,
)
from ..models.proposal import Proposal, VoteRecord
from .context import ERC2771Context
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

logger = structlog.get_logger(__name__)

SAFETY_DELAY = 86_400  # 1 day, in seconds
CREATOR_STAKE_PERCENT = 10
DEFAULT_MINIMUM_VOTING_BALANCE = 10**16  # 0.01 ether


# ═══════════════════════════════════════════════════════════════════════════════
# ABI
# ═══════════════════════════════════════════════════════════════════════════════

PROPOSAL_COMPONENTS: list[dict[str, str]] = [
    {"name": "id", "type": "uint256"},
    {"name": "recipient", "type": "address"},
    {"name": "amount", "type": "uint256"},
    {"name": "votingDeadline", "type": "uint256"},
    {"name": "executionDelay", "type": "uint256"},
    {"name": "executed", "type": "bool"},
    {"name": "forVotes", "type": "uint256"},
    {"name": "againstVotes", "type": "uint256"},
    {"name": "abstainVotes", "type": "uint256"},
    {"name": "description", "type": "string"},
]


def _view(name: str, inputs: list[dict[str, Any]], outputs: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "inputs": inputs,
        "name": name,
        "outputs": outputs,
        "stateMutability": "view",
        "type": "function",
    }


DAO_VOTING_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "name": "fundDAO",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "recipient", "type": "address"},
            {"name": "amount", "type": "uint256"},
            {"name": "votingDuration", "type": "uint256"},
            {"name": "description", "type": "string"},
        ],
        "name": "createProposal",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "proposalId", "type": "uint256"},
            {"name": "voteType", "type": "uint8"},
        ],
        "name": "vote",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [{"name": "proposalId", "type": "uint256"}],
        "name": "executeProposal",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    _view(
        "getProposal",
        [{"name": "proposalId", "type": "uint256"}],
        [{"name": "", "type": "tuple", "components": PROPOSAL_COMPONENTS}],
    ),
    _view(
        "getVote",
        [{"name": "proposalId", "type": "uint256"}, {"name": "voter", "type": "address"}],
        [{"name": "hasVoted", "type": "bool"}, {"name": "voteType", "type": "uint8"}],
    ),
    _view("getUserBalance", [{"name": "user", "type": "address"}], [{"name": "", "type": "uint256"}]),
    _view("getTotalDeposited", [], [{"name": "", "type": "uint256"}]),
    _view("getContractBalance", [], [{"name": "", "type": "uint256"}]),
    _view("nextProposalId", [], [{"name": "", "type": "uint256"}]),
    _view("trustedForwarder", [], [{"name": "", "type": "address"}]),
    _view("minimumVotingBalance", [], [{"name": "", "type": "uint256"}]),
    _view("isTrustedForwarder", [{"name": "forwarder", "type": "address"}], [{"name": "", "type": "bool"}]),
]


# ═══════════════════════════════════════════════════════════════════════════════
# CONTRACT
# ═══════════════════════════════════════════════════════════════════════════════


class DAOVoting(ERC2771Context, ReentrancyGuard):
    """
    Treasury voting ledger.

    Rules:
    - Creating a proposal needs a contribution of at least 10% of everything
      ever deposited (`totalDeposited`, which payouts do not reduce).
    - Voting needs a contribution of at least `minimum_voting_balance`.
    - One standing vote per voter and proposal; it can be changed until the
      deadline without changing the total number of votes.
    - Execution is permissionless once the safety delay has elapsed and FOR
      votes exceed AGAINST votes.
    """

    ABI = DAO_VOTING_ABI
    FUNCTIONS = {
        "fundDAO": "fund_dao",
        "createProposal": "create_proposal",
        "vote": "vote",
        "executeProposal": "execute_proposal",
        "getProposal": "get_proposal",
        "getVote": "get_vote",
        "getUserBalance": "get_user_balance",
        "getTotalDeposited": "get_total_deposited",
        "getContractBalance": "get_contract_balance",
        "nextProposalId": "next_proposal_id",
        "trustedForwarder": "get_trusted_forwarder",
        "minimumVotingBalance": "get_minimum_voting_balance",
        "isTrustedForwarder": "is_trusted_forwarder",
    }
    STORAGE = ("_proposals", "_votes", "_balances", "_total_deposited", "_proposal_count")

    def __init__(
        self,
        trusted_forwarder: str,
        minimum_voting_balance: int = DEFAULT_MINIMUM_VOTING_BALANCE,
    ) -> None:
        super().__init__(trusted_forwarder)
        self.minimum_voting_balance = minimum_voting_balance

        self._proposals: dict[int, Proposal] = {}
        self._votes: dict[tuple[int, str], VoteRecord] = {}
        self._balances: dict[str, int] = {}
        self._total_deposited = 0
        self._proposal_count = 0

    # ------------------------------------------------------------------
    # Funding
    # ------------------------------------------------------------------

    def fund_dao(self) -> None:
        amount = self.msg.value
        if amount == 0:
            raise ZeroAmount()

        contributor = self._msg_sender()
        self._balances[contributor] = self._balances.get(contributor, 0) + amount
        self._total_deposited += amount

        self.emit(FundsDeposited(contributor=contributor, amount=amount))
        logger.info("dao_funded", contributor=contributor, amount=amount)

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def create_proposal(
        self,
        recipient: str,
        amount: int,
        voting_duration: int,
        description: str,
    ) -> int:
        recipient = normalize_address(recipient)
        if recipient == ZERO_ADDRESS:
            raise InvalidRecipient()
        if amount == 0:
            raise InvalidAmount()
        if voting_duration == 0:
            raise InvalidDuration()
        if self._total_deposited == 0:
            raise EmptyTreasury()

        creator = self._msg_sender()
        required_stake = self._total_deposited * CREATOR_STAKE_PERCENT // 100
        contribution = self._balances.get(creator, 0)
        if contribution < required_stake:
            raise InsufficientCreatorStake(required=required_stake, contribution=contribution)

        treasury = self.get_contract_balance()
        if amount > treasury:
            raise InsufficientTreasuryFunds(requested=amount, available=treasury)

        self._proposal_count += 1
        proposal_id = self._proposal_count
        voting_deadline = self.block_timestamp + voting_duration
        self._proposals[proposal_id] = Proposal(
            id=proposal_id,
            recipient=recipient,
            amount=amount,
            voting_deadline=voting_deadline,
            execution_delay=voting_deadline + SAFETY_DELAY,
            description=description,
        )

        self.emit(
            ProposalCreated(
                proposal_id=proposal_id,
                creator=creator,
                recipient=recipient,
                amount=amount,
                voting_deadline=voting_deadline,
                description=description,
            )
        )
        logger.info(
            "proposal_created",
            proposal_id=proposal_id,
            creator=creator,
            recipient=recipient,
            amount=amount,
            voting_deadline=voting_deadline,
        )
        return proposal_id

    def vote(self, proposal_id: int, choice: int) -> None:
        proposal = self._get_existing(proposal_id)
        if self.block_timestamp >= proposal.voting_deadline:
            raise VotingClosed(proposal_id=proposal_id)
        if proposal.executed:
            raise AlreadyExecuted(proposal_id=proposal_id)

        voter = self._msg_sender()
        contribution = self._balances.get(voter, 0)
        if contribution < self.minimum_voting_balance:
            raise InsufficientVotingStake(
                required=self.minimum_voting_balance, contribution=contribution
            )

        try:
            new_choice = VoteType(choice)
        except ValueError:
            raise InvalidVoteType(choice=choice) from None

        record = self._votes.get((proposal_id, voter))
        if record is None:
            self._votes[(proposal_id, voter)] = VoteRecord(has_voted=True, choice=new_choice)
            proposal.add_vote(new_choice)
            self.emit(VoteCast(proposal_id=proposal_id, voter=voter, vote_type=new_choice))
            logger.info("vote_cast", proposal_id=proposal_id, voter=voter, choice=new_choice.name)
            return

        old_choice = record.choice
        proposal.remove_vote(old_choice)
        proposal.add_vote(new_choice)
        record.choice = new_choice
        self.emit(
            VoteChanged(
                proposal_id=proposal_id,
                voter=voter,
                old_vote=old_choice,
                new_vote=new_choice,
            )
        )
        logger.info(
            "vote_changed",
            proposal_id=proposal_id,
            voter=voter,
            old_choice=old_choice.name,
            new_choice=new_choice.name,
        )

    @non_reentrant
    def execute_proposal(self, proposal_id: int) -> None:
        proposal = self._get_existing(proposal_id)
        if proposal.executed:
            raise AlreadyExecuted(proposal_id=proposal_id)

        now = self.block_timestamp
        if now < proposal.voting_deadline:
            raise VotingNotEnded(proposal_id=proposal_id, voting_deadline=proposal.voting_deadline)
        if now < proposal.execution_delay:
            raise ExecutionDelayNotElapsed(
                proposal_id=proposal_id, unlock_time=proposal.execution_delay
            )
        if not proposal.approved:
            raise NotApproved(
                proposal_id=proposal_id,
                for_votes=proposal.for_votes,
                against_votes=proposal.against_votes,
            )

        treasury = self.get_contract_balance()
        if treasury < proposal.amount:
            raise InsufficientTreasuryFunds(requested=proposal.amount, available=treasury)

        proposal.executed = True
        result = self._call(proposal.recipient, value=proposal.amount)
        if not result.success:
            raise TransferFailed(
                proposal_id=proposal_id,
                reason=result.error.message if result.error else None,
            )

        self.emit(
            ProposalExecuted(
                proposal_id=proposal_id,
                recipient=proposal.recipient,
                amount=proposal.amount,
            )
        )
        logger.info(
            "proposal_executed",
            proposal_id=proposal_id,
            recipient=proposal.recipient,
            amount=proposal.amount,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self._get_existing(proposal_id).model_copy()

    def get_vote(self, proposal_id: int, voter: str) -> VoteRecord:
        record = self._votes.get((proposal_id, normalize_address(voter)))
        return record.model_copy() if record is not None else VoteRecord()

    def get_user_balance(self, user: str) -> int:
        return self._balances.get(normalize_address(user), 0)

    def get_total_deposited(self) -> int:
        return self._total_deposited

    def next_proposal_id(self) -> int:
        """Number of proposals created so far (ids run from 1 to this value)."""
        return self._proposal_count

    def get_trusted_forwarder(self) -> str:
        return self.trusted_forwarder

    def get_minimum_voting_balance(self) -> int:
        return self.minimum_voting_balance

    def _get_existing(self, proposal_id: int) -> Proposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise ProposalNotFound(proposal_id=proposal_id)
        return proposal
