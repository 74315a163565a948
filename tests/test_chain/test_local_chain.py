"""
Tests for the LocalChain execution environment.

Covers deployment, atomic transactions, nested calls, static calls, value
transfers, the block clock and event queries, using small purpose-built
contracts.
"""

import pytest

from gasless_dao.chain import (
    ChainError,
    Contract,
    ContractHandle,
    ContractRevert,
    InsufficientBalance,
    LocalChain,
    NonPayableFunction,
    NoReceiveFunction,
    TimestampError,
    UnknownContractError,
    UnknownFunction,
    WriteProtection,
)
from gasless_dao.config import ONE_ETHER
from gasless_dao.models import FundsDeposited

OTHER = "0x00000000000000000000000000000000000000AA"


class Boom(ContractRevert):
    """Test revert."""
    pass


class Counter(Contract):
    ABI = [
        {
            "inputs": [],
            "name": "increment",
            "outputs": [{"name": "", "type": "uint256"}],
            "stateMutability": "nonpayable",
            "type": "function",
        },
        {
            "inputs": [],
            "name": "count",
            "outputs": [{"name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function",
        },
        {
            "inputs": [],
            "name": "deposit",
            "outputs": [],
            "stateMutability": "payable",
            "type": "function",
        },
        {
            "inputs": [],
            "name": "incrementThenFail",
            "outputs": [],
            "stateMutability": "nonpayable",
            "type": "function",
        },
        {
            "inputs": [{"name": "target", "type": "address"}],
            "name": "poke",
            "outputs": [{"name": "", "type": "bool"}],
            "stateMutability": "nonpayable",
            "type": "function",
        },
    ]
    FUNCTIONS = {
        "increment": "increment",
        "count": "get_count",
        "deposit": "deposit",
        "incrementThenFail": "increment_then_fail",
        "poke": "poke",
    }
    STORAGE = ("count",)

    def __init__(self):
        super().__init__()
        self.count = 0

    def increment(self):
        self.count += 1
        return self.count

    def get_count(self):
        return self.count

    def deposit(self):
        self.emit(FundsDeposited(contributor=self._msg_sender(), amount=self.msg.value))

    def increment_then_fail(self):
        self.count += 1
        self.emit(FundsDeposited(contributor=self._msg_sender(), amount=1))
        raise Boom(reason="always")

    def poke(self, target):
        self.count += 1
        data = Counter._function_table_selector("incrementThenFail")
        result = self._call(target, data=data)
        return result.success

    @classmethod
    def _function_table_selector(cls, name):
        for selector, spec in cls._function_table.items():
            if spec.name == name:
                return selector
        raise KeyError(name)


# ==================== Fixtures ====================


@pytest.fixture
def ledger(alice):
    chain = LocalChain(timestamp=1_000)
    chain.set_balance(alice.address, 10 * ONE_ETHER)
    return chain


@pytest.fixture
def counter(ledger):
    contract = Counter()
    ledger.deploy(contract)
    return contract


@pytest.fixture
def handle(counter):
    return ContractHandle.for_contract(counter)


# ==================== Deployment Tests ====================


class TestDeployment:
    """Tests for contract deployment."""

    def test_deploy_binds_contract(self, ledger, counter):
        """Deployed contracts know their chain and address."""
        assert counter.chain is ledger
        assert ledger.is_contract(counter.address)
        assert ledger.get_contract(counter.address) is counter

    def test_addresses_are_deterministic(self):
        """Same deployment order gives the same addresses."""
        first = LocalChain().deploy(Counter())
        second = LocalChain().deploy(Counter())
        assert first == second

    def test_addresses_are_distinct(self, ledger):
        """Each deployment gets a new address."""
        assert ledger.deploy(Counter()) != ledger.deploy(Counter())

    def test_deploy_twice_fails(self, ledger, counter):
        """A contract instance can only be deployed once."""
        with pytest.raises(ChainError):
            ledger.deploy(counter)

    def test_unknown_contract(self, ledger):
        """Looking up an address without code fails."""
        with pytest.raises(UnknownContractError):
            ledger.get_contract(OTHER)

    def test_missing_method_mapping_rejected(self):
        """Every ABI function needs a Python method."""
        with pytest.raises(TypeError):

            class Broken(Contract):
                ABI = Counter.ABI
                FUNCTIONS = {}


# ==================== Transaction Tests ====================


class TestTransactions:
    """Tests for top-level transactions."""

    def test_transaction_commits(self, ledger, handle, counter, alice):
        """A successful call changes state and returns ABI-encoded output."""
        receipt = handle.transact("increment", sender=alice.address)

        assert counter.count == 1
        assert handle.decode_output("increment", receipt.return_data) == 1
        assert receipt.status == 1
        assert receipt.sender == alice.address
        assert receipt.block_number == 1

    def test_each_transaction_mines_a_block(self, ledger, handle, alice):
        """Block numbers increase with every transaction."""
        first = handle.transact("increment", sender=alice.address)
        second = handle.transact("increment", sender=alice.address)
        assert second.block_number == first.block_number + 1
        assert first.tx_hash != second.tx_hash

    def test_revert_restores_state(self, ledger, handle, counter, alice):
        """A reverting transaction leaves storage and events untouched."""
        handle.transact("increment", sender=alice.address)

        with pytest.raises(Boom) as exc_info:
            handle.transact("incrementThenFail", sender=alice.address)

        assert exc_info.value.details == {"reason": "always"}
        assert counter.count == 1
        assert ledger.get_logs(FundsDeposited) == []

    def test_value_transfer(self, ledger, handle, counter, alice):
        """Value moves from sender to the contract."""
        receipt = handle.transact("deposit", sender=alice.address, value=ONE_ETHER)

        assert ledger.balance_of(counter.address) == ONE_ETHER
        assert ledger.balance_of(alice.address) == 9 * ONE_ETHER
        assert receipt.events(FundsDeposited)[0].amount == ONE_ETHER

    def test_insufficient_balance(self, ledger, handle, bob):
        """Sending more than the balance reverts."""
        with pytest.raises(InsufficientBalance):
            handle.transact("deposit", sender=bob.address, value=1)

    def test_value_to_non_payable_function(self, ledger, handle, counter, alice):
        """Non-payable functions reject value and the transfer is undone."""
        with pytest.raises(NonPayableFunction):
            handle.transact("increment", sender=alice.address, value=1)

        assert ledger.balance_of(alice.address) == 10 * ONE_ETHER
        assert counter.count == 0

    def test_unknown_selector(self, ledger, counter, alice):
        """Calldata that matches no function reverts."""
        with pytest.raises(UnknownFunction):
            ledger.send_transaction(alice.address, counter.address, data=b"\xde\xad\xbe\xef")

    def test_plain_transfer_to_account(self, ledger, alice):
        """Transfers to addresses without code just move value."""
        ledger.send_transaction(alice.address, OTHER, value=ONE_ETHER)
        assert ledger.balance_of(OTHER) == ONE_ETHER

    def test_plain_transfer_to_contract_without_receive(self, ledger, counter, alice):
        """Contracts reject plain transfers unless they define receive."""
        with pytest.raises(NoReceiveFunction):
            ledger.send_transaction(alice.address, counter.address, value=ONE_ETHER)
        assert ledger.balance_of(counter.address) == 0


# ==================== Nested Call Tests ====================


class TestNestedCalls:
    """Tests for calls made by contracts."""

    def test_failed_nested_call_rolls_back_callee_only(self, ledger, alice):
        """The caller sees success=False and keeps its own changes."""
        caller, callee = Counter(), Counter()
        ledger.deploy(caller)
        ledger.deploy(callee)
        handle = ContractHandle.for_contract(caller)

        receipt = handle.transact("poke", callee.address, sender=alice.address)

        assert handle.decode_output("poke", receipt.return_data) is False
        assert caller.count == 1
        assert callee.count == 0
        assert receipt.logs == []

    def test_call_outside_transaction(self, ledger, counter):
        """Nested calls need an executing frame."""
        with pytest.raises(ChainError):
            ledger.call(OTHER, counter.address)


# ==================== Static Call Tests ====================


class TestStaticCalls:
    """Tests for read-only calls."""

    def test_view_call(self, handle, alice):
        """View functions can be called without a transaction."""
        handle.transact("increment", sender=alice.address)
        assert handle.call("count") == 1

    def test_state_changing_call_rejected(self, handle, counter):
        """Non-view functions are write protected in static calls."""
        with pytest.raises(WriteProtection):
            handle.call("increment")
        assert counter.count == 0

    def test_static_call_does_not_mine(self, ledger, handle):
        """Static calls leave the block number alone."""
        handle.call("count")
        assert ledger.block_number == 0


# ==================== Clock Tests ====================


class TestClock:
    """Tests for the block timestamp."""

    def test_advance_time(self, ledger):
        assert ledger.advance_time(60) == 1_060
        assert ledger.block_timestamp == 1_060

    def test_set_timestamp(self, ledger):
        ledger.set_timestamp(5_000)
        assert ledger.block_timestamp == 5_000

    def test_time_cannot_go_backwards(self, ledger):
        with pytest.raises(TimestampError):
            ledger.set_timestamp(999)
        with pytest.raises(TimestampError):
            ledger.advance_time(-1)

    def test_transactions_do_not_move_time(self, ledger, handle, alice):
        receipt = handle.transact("increment", sender=alice.address)
        assert receipt.timestamp == 1_000
        assert ledger.block_timestamp == 1_000


# ==================== Event Query Tests ====================


class TestLogs:
    """Tests for get_logs."""

    def test_filter_by_indexed_field(self, ledger, handle, alice, bob):
        ledger.set_balance(bob.address, ONE_ETHER)
        handle.transact("deposit", sender=alice.address, value=1)
        handle.transact("deposit", sender=bob.address, value=2)

        logs = ledger.get_logs(FundsDeposited, contributor=bob.address)

        assert len(logs) == 1
        assert logs[0].event.amount == 2
        assert logs[0].name == "FundsDeposited"

    def test_filter_by_block_range(self, ledger, handle, alice):
        handle.transact("deposit", sender=alice.address, value=1)
        handle.transact("deposit", sender=alice.address, value=2)

        assert len(ledger.get_logs(FundsDeposited, from_block=2)) == 1
        assert len(ledger.get_logs(FundsDeposited, to_block=1)) == 1

    def test_non_indexed_filter_rejected(self, ledger):
        with pytest.raises(ValueError):
            ledger.get_logs(FundsDeposited, amount=1)
