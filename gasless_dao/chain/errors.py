"""
Ledger Errors

Two families:

* ContractRevert - raised by contract code. The ledger rolls back the failing
  call frame and, at the top level, the whole transaction. Subclasses are the
  named errors callers match on (InvalidMetaTransaction, VotingClosed, ...).
* ChainError - misuse of the execution environment itself (unknown contract,
  clock going backwards). These are programming errors and simply propagate.
"""

from typing import Any


class ChainError(Exception):
    """Base exception for execution environment errors."""
    pass


class UnknownContractError(ChainError):
    """Raised when a contract is looked up at an address without code."""
    pass


class TimestampError(ChainError):
    """Raised when the block timestamp would move backwards."""
    pass


class ContractRevert(Exception):
    """
    A contract-level failure that aborts the current call.

    The error name is the class name. Keyword details are kept on the instance
    so callers (and relayers bubbling the failure up) can report them verbatim.
    """

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.details = details
        if message is None:
            message = self.name
            if details:
                rendered = ", ".join(f"{k}={v}" for k, v in details.items())
                message = f"{message}({rendered})"
        self.message = message
        super().__init__(message)

    @property
    def name(self) -> str:
        return type(self).__name__


class InsufficientBalance(ContractRevert):
    """Raised when a value transfer exceeds the sender's balance."""
    pass


class UnknownFunction(ContractRevert):
    """Raised when calldata does not match any function of the contract."""
    pass


class InvalidCalldata(ContractRevert):
    """Raised when arguments cannot be decoded from calldata."""
    pass


class NonPayableFunction(ContractRevert):
    """Raised when value is sent to a function that does not accept it."""
    pass


class NoReceiveFunction(ContractRevert):
    """Raised when a contract without a receive hook gets a plain transfer."""
    pass


class WriteProtection(ContractRevert):
    """Raised when a state-changing call is attempted in a static context."""
    pass


class ReentrantCall(ContractRevert):
    """Raised when a guarded function is entered while already executing."""
    pass
