"""
Tests for the read-side proposal helpers.
"""

import pytest

from gasless_dao.config import ONE_ETHER
from gasless_dao.ledger import (
    SAFETY_DELAY,
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
from gasless_dao.models import Proposal, ProposalState, VoteType

NOW = 1_700_000_000
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


def make_proposal(**overrides):
    fields = {
        "id": 1,
        "recipient": RECIPIENT,
        "amount": ONE_ETHER,
        "voting_deadline": NOW + 100,
        "execution_delay": NOW + 100 + SAFETY_DELAY,
    }
    fields.update(overrides)
    return Proposal(**fields)


# ==================== Derived State Tests ====================


class TestProposalState:
    """Tests for lifecycle derivation."""

    @pytest.mark.parametrize(
        "now,expected",
        [
            (NOW, ProposalState.VOTING),
            (NOW + 99, ProposalState.VOTING),
            (NOW + 100, ProposalState.AWAITING_DELAY),
            (NOW + 100 + SAFETY_DELAY - 1, ProposalState.AWAITING_DELAY),
            (NOW + 100 + SAFETY_DELAY, ProposalState.EXECUTABLE),
        ],
    )
    def test_states(self, now, expected):
        assert proposal_state(make_proposal(), now) == expected

    def test_executed_is_terminal(self):
        assert proposal_state(make_proposal(executed=True), NOW) == ProposalState.EXECUTED

    def test_is_active(self):
        assert is_active(make_proposal(), NOW) is True
        assert is_active(make_proposal(), NOW + 100) is False
        assert is_active(make_proposal(executed=True), NOW) is False

    def test_time_remaining(self):
        assert time_remaining(make_proposal(), NOW) == 100
        assert time_remaining(make_proposal(), NOW + 500) == 0


class TestVotePercentages:
    """Tests for tallies and percentages."""

    def test_no_votes(self):
        percentages = vote_percentages(make_proposal())
        assert (percentages.for_, percentages.against, percentages.abstain) == (0.0, 0.0, 0.0)

    def test_rounded_to_one_decimal(self):
        proposal = make_proposal(for_votes=1, against_votes=1, abstain_votes=1)
        percentages = vote_percentages(proposal)

        assert total_votes(proposal) == 3
        assert percentages.for_ == 33.3
        assert percentages.against == 33.3
        assert percentages.abstain == 33.3

    def test_split(self):
        percentages = vote_percentages(make_proposal(for_votes=3, against_votes=1))
        assert percentages.for_ == 75.0
        assert percentages.against == 25.0


# ==================== Contract Read Tests ====================


class TestContractReads:
    """Tests for helpers reading through a contract handle."""

    @pytest.fixture
    def populated(self, dao, alice, bob, recipient):
        dao.transact("fundDAO", sender=alice.address, value=4 * ONE_ETHER)
        dao.transact("fundDAO", sender=bob.address, value=ONE_ETHER)
        dao.transact("createProposal", recipient, ONE_ETHER, 100, "First", sender=alice.address)
        dao.transact("createProposal", recipient, 2 * ONE_ETHER, 100, "Second", sender=bob.address)
        return dao

    def test_get_proposal(self, populated):
        proposal = get_proposal(populated, 2)
        assert proposal.description == "Second"
        assert proposal.amount == 2 * ONE_ETHER

    def test_get_missing_proposal(self, populated):
        assert get_proposal(populated, 3) is None

    def test_list_proposals(self, populated):
        assert [p.id for p in list_proposals(populated)] == [1, 2]

    def test_list_empty(self, dao):
        assert list_proposals(dao) == []

    def test_proposal_creator(self, populated, alice, bob):
        assert proposal_creator(populated, 1) == alice.address
        assert proposal_creator(populated, 2) == bob.address
        assert proposal_creator(populated, 3) is None

    def test_creator_from_block(self, chain, populated):
        assert proposal_creator(populated, 1, from_block=chain.block_number + 1) is None

    def test_can_execute(self, chain, populated, alice):
        populated.transact("vote", 1, VoteType.FOR, sender=alice.address)
        unlock = get_proposal(populated, 1).execution_delay

        assert can_execute_proposal(populated, 1) is False
        assert can_execute_proposal(populated, 1, now=unlock - 1) is False
        assert can_execute_proposal(populated, 1, now=unlock) is True

        chain.set_timestamp(unlock)
        assert can_execute_proposal(populated, 1) is True
        populated.transact("executeProposal", 1, sender=alice.address)
        assert can_execute_proposal(populated, 1) is False

    def test_cannot_execute_rejected(self, populated, bob):
        populated.transact("vote", 2, VoteType.AGAINST, sender=bob.address)
        unlock = get_proposal(populated, 2).execution_delay

        assert can_execute_proposal(populated, 2, now=unlock) is False

    def test_cannot_execute_missing(self, populated):
        assert can_execute_proposal(populated, 99) is False


class TestPreValidateCreateProposal:
    """Tests for pre_validate_create_proposal."""

    def test_empty_treasury(self, dao, alice):
        ok, issues = pre_validate_create_proposal(dao, alice.address, ONE_ETHER)

        assert ok is False
        assert len(issues) == 2
        assert "no deposits" in issues[1]

    def test_valid(self, dao, alice):
        dao.transact("fundDAO", sender=alice.address, value=ONE_ETHER)
        assert pre_validate_create_proposal(dao, alice.address, ONE_ETHER) == (True, [])

    def test_insufficient_stake_message(self, dao, alice, carol):
        dao.transact("fundDAO", sender=alice.address, value=10 * ONE_ETHER)

        ok, issues = pre_validate_create_proposal(dao, carol.address, ONE_ETHER)

        assert ok is False
        assert issues == [
            "You need to contribute at least 10% of the DAO total (1.0000 ETH) to create proposals."
        ]

    def test_amount_above_treasury(self, dao, alice):
        dao.transact("fundDAO", sender=alice.address, value=ONE_ETHER)

        ok, issues = pre_validate_create_proposal(dao, alice.address, 2 * ONE_ETHER)

        assert ok is False
        assert issues == ["The DAO treasury does not hold enough funds for this amount."]
