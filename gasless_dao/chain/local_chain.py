"""
LocalChain - In-Process Deterministic Ledger

The execution environment the forwarder and the voting ledger run on. It
holds native balances and deployed contracts, runs calls one at a time and
applies each call frame atomically:

* a reverting frame restores every balance and every contract's STORAGE to
  the state at frame entry and discards the frame's events;
* a reverting top-level transaction re-raises the revert to the submitter;
* a reverting nested call is reported to the calling contract as
  CallResult(success=False) so it can decide to bubble up or handle it.

Gas is carried on every message but not metered. The block timestamp only
moves when advance_time / set_timestamp is called.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import structlog
from eth_abi import encode
from eth_utils import keccak

from ..models.base import ZERO_ADDRESS, normalize_address, to_hex
from ..models.chain import EventLog, Receipt
from ..models.events import ContractEvent
from .contract import Contract
from .errors import (
    ChainError,
    ContractRevert,
    InsufficientBalance,
    TimestampError,
    UnknownContractError,
    WriteProtection,
)

logger = structlog.get_logger(__name__)

LOCAL_CHAIN_ID = 31337


@dataclass(frozen=True)
class Message:
    """The context of one call frame (msg.sender, msg.value, msg.data, gas)."""

    sender: str
    to: str
    value: int
    data: bytes
    gas: int
    static: bool = False


@dataclass
class CallResult:
    """Outcome of a nested message call."""

    success: bool
    return_data: bytes = b""
    error: ContractRevert | None = None


@dataclass
class _Frame:
    message: Message
    logs: list[tuple[str, ContractEvent]] = field(default_factory=list)


class LocalChain:
    """
    Single-process ledger with atomic, serialized call execution.

    Example:
        chain = LocalChain()
        chain.set_balance(alice, 10 * ONE_ETHER)
        forwarder_address = chain.deploy(MinimalForwarder())
        receipt = chain.send_transaction(alice, dao_address, data=calldata, value=amount)
    """

    DEFAULT_GAS = 30_000_000

    def __init__(self, chain_id: int = LOCAL_CHAIN_ID, timestamp: int | None = None) -> None:
        self.chain_id = chain_id
        self.block_number = 0
        self._timestamp = int(time.time()) if timestamp is None else timestamp
        self._balances: dict[str, int] = {}
        self._contracts: dict[str, Contract] = {}
        self._frames: list[_Frame] = []
        self._logs: list[EventLog] = []
        self._tx_count = 0
        self._deploy_count = 0

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    @property
    def block_timestamp(self) -> int:
        return self._timestamp

    def advance_time(self, seconds: int) -> int:
        if seconds < 0:
            raise TimestampError("Cannot move the block timestamp backwards")
        self._timestamp += seconds
        return self._timestamp

    def set_timestamp(self, timestamp: int) -> int:
        if timestamp < self._timestamp:
            raise TimestampError(
                f"Timestamp {timestamp} is before current block timestamp {self._timestamp}"
            )
        self._timestamp = timestamp
        return self._timestamp

    # ------------------------------------------------------------------
    # Accounts and contracts
    # ------------------------------------------------------------------

    def balance_of(self, address: str) -> int:
        return self._balances.get(normalize_address(address), 0)

    def set_balance(self, address: str, amount: int) -> None:
        """Seed an account balance (test and local-node convenience)."""
        if amount < 0:
            raise ValueError("Balance cannot be negative")
        self._balances[normalize_address(address)] = amount

    def is_contract(self, address: str) -> bool:
        return normalize_address(address) in self._contracts

    def get_contract(self, address: str) -> Contract:
        contract = self._contracts.get(normalize_address(address))
        if contract is None:
            raise UnknownContractError(f"No contract deployed at {address}")
        return contract

    def deploy(self, contract: Contract, deployer: str = ZERO_ADDRESS) -> str:
        """Deploy a contract at a deterministic address and return the address."""
        if contract.address is not None:
            raise ChainError(f"{type(contract).__name__} is already deployed at {contract.address}")
        self._deploy_count += 1
        digest = keccak(
            encode(["address", "uint256"], [normalize_address(deployer), self._deploy_count])
        )
        address = normalize_address(digest[12:])
        self._contracts[address] = contract
        contract.on_deploy(self, address)
        logger.debug(
            "contract_deployed",
            contract=type(contract).__name__,
            address=address,
        )
        return address

    # ------------------------------------------------------------------
    # Execution context
    # ------------------------------------------------------------------

    @property
    def current_message(self) -> Message:
        if not self._frames:
            raise ChainError("No call is executing")
        return self._frames[-1].message

    @property
    def in_call(self) -> bool:
        return bool(self._frames)

    def emit(self, address: str, event: ContractEvent) -> None:
        if not self._frames:
            raise ChainError("Events can only be emitted during a call")
        self._frames[-1].logs.append((address, event))

    def _snapshot(self) -> tuple[dict[str, int], dict[str, dict[str, Any]]]:
        return (
            dict(self._balances),
            {addr: c.snapshot() for addr, c in self._contracts.items()},
        )

    def _restore(self, snapshot: tuple[dict[str, int], dict[str, dict[str, Any]]]) -> None:
        balances, storage = snapshot
        self._balances = balances
        for addr, state in storage.items():
            self._contracts[addr].restore(state)

    def _transfer(self, sender: str, to: str, value: int) -> None:
        if value <= 0:
            return
        available = self._balances.get(sender, 0)
        if available < value:
            raise InsufficientBalance(account=sender, required=value, available=available)
        self._balances[sender] = available - value
        self._balances[to] = self._balances.get(to, 0) + value

    def _run_frame(self, message: Message) -> tuple[bytes, list[tuple[str, ContractEvent]]]:
        """Execute one call frame atomically, returning its output and events."""
        snapshot = self._snapshot()
        frame = _Frame(message)
        self._frames.append(frame)
        try:
            if message.static and message.value:
                raise WriteProtection("Value transfer in a static context")
            self._transfer(message.sender, message.to, message.value)
            contract = self._contracts.get(message.to)
            output = contract.dispatch() if contract is not None else b""
        except BaseException:
            self._frames.pop()
            self._restore(snapshot)
            raise
        self._frames.pop()
        return output, frame.logs

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def send_transaction(
        self,
        sender: str,
        to: str,
        data: bytes = b"",
        value: int = 0,
        gas: int | None = None,
    ) -> Receipt:
        """
        Submit a top-level transaction.

        Returns the receipt on success. On revert every change made by the
        transaction is undone and the ContractRevert is re-raised.
        """
        if self._frames:
            raise ChainError("send_transaction cannot be called from inside a call")

        sender = normalize_address(sender)
        to = normalize_address(to)
        self._tx_count += 1
        self.block_number += 1
        tx_hash = to_hex(
            keccak(
                encode(
                    ["uint256", "address", "address", "uint256", "bytes"],
                    [self._tx_count, sender, to, value, data],
                )
            )
        )
        message = Message(
            sender=sender,
            to=to,
            value=value,
            data=data,
            gas=gas or self.DEFAULT_GAS,
        )

        try:
            output, frame_logs = self._run_frame(message)
        except ContractRevert as e:
            logger.info(
                "transaction_reverted",
                tx_hash=tx_hash,
                sender=sender,
                to=to,
                error=e.name,
            )
            raise

        logs = [
            EventLog(
                address=address,
                event=event,
                block_number=self.block_number,
                tx_hash=tx_hash,
                log_index=len(self._logs) + index,
            )
            for index, (address, event) in enumerate(frame_logs)
        ]
        self._logs.extend(logs)

        logger.debug(
            "transaction_committed",
            tx_hash=tx_hash,
            block_number=self.block_number,
            events=len(logs),
        )
        return Receipt(
            tx_hash=tx_hash,
            block_number=self.block_number,
            timestamp=self._timestamp,
            sender=sender,
            to=to,
            value=value,
            return_data=output,
            logs=logs,
        )

    def call(
        self,
        sender: str,
        to: str,
        data: bytes = b"",
        value: int = 0,
        gas: int | None = None,
    ) -> CallResult:
        """
        Nested message call made by a contract during a transaction.

        A revert in the callee only undoes the callee's frame.
        """
        if not self._frames:
            raise ChainError("call() is only available to executing contracts")

        parent = self._frames[-1]
        message = Message(
            sender=normalize_address(sender),
            to=normalize_address(to),
            value=value,
            data=data,
            gas=gas or parent.message.gas,
            static=parent.message.static,
        )
        try:
            output, frame_logs = self._run_frame(message)
        except ContractRevert as e:
            return CallResult(success=False, error=e)
        parent.logs.extend(frame_logs)
        return CallResult(success=True, return_data=output)

    def static_call(self, sender: str, to: str, data: bytes) -> bytes:
        """Read-only call. State-changing functions revert with WriteProtection."""
        message = Message(
            sender=normalize_address(sender),
            to=normalize_address(to),
            value=0,
            data=data,
            gas=self.DEFAULT_GAS,
            static=True,
        )
        snapshot = self._snapshot()
        try:
            output, _ = self._run_frame(message)
        finally:
            self._restore(snapshot)
        return output

    # ------------------------------------------------------------------
    # Event queries
    # ------------------------------------------------------------------

    def get_logs(
        self,
        event_type: type[ContractEvent] | None = None,
        address: str | None = None,
        from_block: int = 0,
        to_block: int | None = None,
        **filters: Any,
    ) -> list[EventLog]:
        """
        Query committed events.

        Keyword filters match indexed event fields, e.g.
        get_logs(ProposalCreated, proposal_id=1).
        """
        if event_type is not None:
            unknown = set(filters) - set(event_type.INDEXED_FIELDS)
            if unknown:
                raise ValueError(f"{event_type.__name__} has no indexed fields {sorted(unknown)}")
        wanted_address = normalize_address(address) if address else None

        matches = []
        for log in self._logs:
            if log.block_number < from_block:
                continue
            if to_block is not None and log.block_number > to_block:
                continue
            if wanted_address and log.address != wanted_address:
                continue
            if event_type is not None and not isinstance(log.event, event_type):
                continue
            if any(getattr(log.event, k, None) != v for k, v in filters.items()):
                continue
            matches.append(log)
        return matches
