"""
Ledger Transaction Models

Receipts and event logs produced by LocalChain for committed transactions.
"""

from pydantic import Field

from .base import Address, DAOBaseModel, HexBytes
from .events import ContractEvent


class EventLog(DAOBaseModel):
    """An event emitted by a contract inside a committed transaction."""

    address: Address = Field(description="Emitting contract")
    event: ContractEvent
    block_number: int
    tx_hash: str
    log_index: int

    @property
    def name(self) -> str:
        return self.event.event_name()


class Receipt(DAOBaseModel):
    """Outcome of a committed top-level transaction."""

    tx_hash: str
    block_number: int
    timestamp: int
    sender: Address
    to: Address
    value: int = 0
    status: int = Field(default=1, description="1 for success")
    return_data: HexBytes = b""
    logs: list[EventLog] = Field(default_factory=list)

    def events(self, event_type: type[ContractEvent] | None = None) -> list[ContractEvent]:
        return [
            log.event
            for log in self.logs
            if event_type is None or isinstance(log.event, event_type)
        ]
