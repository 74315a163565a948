"""
Contract Base Class

Contracts are plain Python objects deployed onto a LocalChain. Calls reach
them as raw calldata; `dispatch` decodes the selector and arguments against
the class ABI and invokes the mapped method. Only attributes listed in
STORAGE are part of the ledger's rollback snapshot.
"""

from __future__ import annotations

import copy
import functools
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from ..models.events import ContractEvent
from .abi import FunctionSpec, build_function_table, decode_arguments, encode_return
from .errors import (
    ChainError,
    NonPayableFunction,
    NoReceiveFunction,
    ReentrantCall,
    UnknownFunction,
    WriteProtection,
)

if TYPE_CHECKING:
    from .local_chain import CallResult, LocalChain, Message

F = TypeVar("F", bound=Callable[..., Any])


class Contract:
    """
    Base class for ledger contracts.

    Subclasses declare:
        ABI: Solidity-style ABI entries for their external functions
        FUNCTIONS: ABI function name -> Python method name
        STORAGE: attribute names captured in rollback snapshots
    """

    ABI: ClassVar[list[dict[str, Any]]] = []
    FUNCTIONS: ClassVar[dict[str, str]] = {}
    STORAGE: ClassVar[tuple[str, ...]] = ()

    _function_table: ClassVar[dict[bytes, FunctionSpec]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._function_table = build_function_table(cls.ABI)
        missing = {spec.name for spec in cls._function_table.values()} - set(cls.FUNCTIONS)
        if missing:
            raise TypeError(f"{cls.__name__} has no method mapping for {sorted(missing)}")

    def __init__(self) -> None:
        self.chain: LocalChain | None = None
        self.address: str | None = None

    # ------------------------------------------------------------------
    # Deployment and context
    # ------------------------------------------------------------------

    def on_deploy(self, chain: LocalChain, address: str) -> None:
        """Bind the contract to its ledger. Subclasses extend this for setup."""
        self.chain = chain
        self.address = address

    def _require_chain(self) -> LocalChain:
        if self.chain is None or self.address is None:
            raise ChainError(f"{type(self).__name__} is not deployed")
        return self.chain

    @property
    def msg(self) -> Message:
        return self._require_chain().current_message

    @property
    def block_timestamp(self) -> int:
        return self._require_chain().block_timestamp

    def _msg_sender(self) -> str:
        return self.msg.sender

    def _msg_data(self) -> bytes:
        return self.msg.data

    def get_contract_balance(self) -> int:
        chain = self._require_chain()
        return chain.balance_of(self.address)

    def emit(self, event: ContractEvent) -> None:
        self._require_chain().emit(self.address, event)

    def _call(self, to: str, data: bytes = b"", value: int = 0, gas: int | None = None) -> CallResult:
        """Low-level message call from this contract."""
        return self._require_chain().call(self.address, to, data=data, value=value, gas=gas)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def receive(self) -> None:
        """Handle a call with empty calldata. Plain transfers are rejected by default."""
        raise NoReceiveFunction(f"{type(self).__name__} does not accept plain transfers")

    def dispatch(self) -> bytes:
        message = self.msg
        data = self._msg_data()

        if not data:
            if message.static:
                return b""
            self.receive()
            return b""

        spec = self._function_table.get(data[:4])
        if spec is None:
            raise UnknownFunction(selector="0x" + data[:4].hex())
        if message.static and not spec.is_read_only:
            raise WriteProtection(f"{spec.name} cannot be called in a static context")
        if message.value and not spec.is_payable:
            raise NonPayableFunction(f"{spec.name} does not accept value")

        args = decode_arguments(spec, data[4:])
        result = getattr(self, self.FUNCTIONS[spec.name])(*args)
        return encode_return(spec, result)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self.STORAGE}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)


class ReentrancyGuard:
    """
    Mixin holding a contract-wide lock for `non_reentrant` methods.

    The lock covers the whole guarded call, including every nested call the
    guarded function triggers, and is shared by all guarded functions.
    """

    _reentrancy_locked: bool = False


def non_reentrant(func: F) -> F:
    @functools.wraps(func)
    def wrapper(self: ReentrancyGuard, *args: Any, **kwargs: Any) -> Any:
        if self._reentrancy_locked:
            raise ReentrantCall(f"Reentrant call to {func.__name__}")
        self._reentrancy_locked = True
        try:
            return func(self, *args, **kwargs)
        finally:
            self._reentrancy_locked = False

    return wrapper  # type: ignore[return-value]
