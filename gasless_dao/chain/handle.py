"""
Contract Handles

A ContractHandle is the caller-side view of a deployed contract: it encodes
calldata from the ABI, submits transactions and decodes static call results.
Relayers, signing helpers and tests talk to contracts through handles the
same way a web3 client would.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..models.base import ZERO_ADDRESS, normalize_address
from ..models.chain import Receipt
from .abi import FunctionSpec, build_function_table, decode_return, encode_function_call

if TYPE_CHECKING:
    from .contract import Contract
    from .local_chain import LocalChain


class ContractHandle:
    """ABI-driven client for one contract on a LocalChain."""

    def __init__(self, chain: LocalChain, address: str, abi: list[dict[str, Any]]) -> None:
        self.chain = chain
        self.address = normalize_address(address)
        self._functions = {spec.name: spec for spec in build_function_table(abi).values()}

    @classmethod
    def for_contract(cls, contract: Contract) -> ContractHandle:
        if contract.chain is None or contract.address is None:
            raise ValueError(f"{type(contract).__name__} is not deployed")
        return cls(contract.chain, contract.address, contract.ABI)

    def _spec(self, fn_name: str) -> FunctionSpec:
        try:
            return self._functions[fn_name]
        except KeyError:
            raise AttributeError(f"Contract ABI has no function '{fn_name}'") from None

    def encode(self, fn_name: str, *args: Any) -> bytes:
        """Encode calldata for `fn_name(*args)`."""
        return encode_function_call(self._spec(fn_name), args)

    def transact(
        self,
        fn_name: str,
        *args: Any,
        sender: str,
        value: int = 0,
        gas: int | None = None,
    ) -> Receipt:
        return self.chain.send_transaction(
            sender,
            self.address,
            data=self.encode(fn_name, *args),
            value=value,
            gas=gas,
        )

    def call(self, fn_name: str, *args: Any, sender: str = ZERO_ADDRESS) -> Any:
        spec = self._spec(fn_name)
        output = self.chain.static_call(sender, self.address, encode_function_call(spec, args))
        return decode_return(spec, output)

    def decode_output(self, fn_name: str, data: bytes) -> Any:
        return decode_return(self._spec(fn_name), data)
