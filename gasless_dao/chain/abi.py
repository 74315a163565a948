"""
Contract ABI Codec

Function selectors, calldata encoding and return-value decoding for the
contracts in this package, using eth_abi with Solidity ABI JSON entries.
Only plain function entries are supported (no overloading).
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from eth_utils import keccak

from ..models.base import normalize_address
from .errors import InvalidCalldata

SELECTOR_LENGTH = 4


def abi_type(param: dict[str, Any]) -> str:
    """Canonical type string of an ABI parameter, expanding tuples."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param["components"])
        return f"({inner}){typ[len('tuple'):]}"
    return typ


@dataclass(frozen=True)
class FunctionSpec:
    """A parsed ABI function entry."""

    name: str
    inputs: tuple[dict[str, Any], ...]
    outputs: tuple[dict[str, Any], ...]
    state_mutability: str

    @property
    def input_types(self) -> list[str]:
        return [abi_type(p) for p in self.inputs]

    @property
    def output_types(self) -> list[str]:
        return [abi_type(p) for p in self.outputs]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.input_types)})"

    @property
    def selector(self) -> bytes:
        return keccak(text=self.signature)[:SELECTOR_LENGTH]

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in ("view", "pure")

    @property
    def is_payable(self) -> bool:
        return self.state_mutability == "payable"


def build_function_table(abi: list[dict[str, Any]]) -> dict[bytes, FunctionSpec]:
    """Map selectors to function specs for every function entry of an ABI."""
    table: dict[bytes, FunctionSpec] = {}
    for entry in abi:
        if entry.get("type") != "function":
            continue
        spec = FunctionSpec(
            name=entry["name"],
            inputs=tuple(entry.get("inputs", [])),
            outputs=tuple(entry.get("outputs", [])),
            state_mutability=entry.get("stateMutability", "nonpayable"),
        )
        table[spec.selector] = spec
    return table


def _prepare(param: dict[str, Any], value: Any) -> Any:
    """Convert Python values (models, enums) into eth_abi encodable values."""
    if hasattr(value, "as_abi_tuple"):
        value = value.as_abi_tuple()
    if param["type"] == "tuple":
        return tuple(_prepare(c, v) for c, v in zip(param["components"], value))
    if isinstance(value, IntEnum):
        return int(value)
    return value


def _normalize(param: dict[str, Any], value: Any) -> Any:
    """Checksum decoded addresses, recursing into tuples."""
    if param["type"] == "address":
        return normalize_address(value)
    if param["type"] == "tuple":
        return tuple(_normalize(c, v) for c, v in zip(param["components"], value))
    return value


def encode_function_call(spec: FunctionSpec, args: tuple[Any, ...]) -> bytes:
    if len(args) != len(spec.inputs):
        raise TypeError(f"{spec.name} expects {len(spec.inputs)} arguments, got {len(args)}")
    values = [_prepare(p, a) for p, a in zip(spec.inputs, args)]
    return spec.selector + encode(spec.input_types, values)


def decode_arguments(spec: FunctionSpec, payload: bytes) -> tuple[Any, ...]:
    """Decode calldata arguments (selector already stripped)."""
    try:
        values = decode(spec.input_types, payload)
    except (DecodingError, UnicodeDecodeError) as e:
        raise InvalidCalldata(f"Cannot decode arguments for {spec.name}: {e}") from e
    return tuple(_normalize(p, v) for p, v in zip(spec.inputs, values))


def encode_return(spec: FunctionSpec, result: Any) -> bytes:
    if not spec.outputs:
        return b""
    if len(spec.outputs) == 1:
        return encode(spec.output_types, [_prepare(spec.outputs[0], result)])
    if hasattr(result, "as_abi_tuple"):
        result = result.as_abi_tuple()
    values = [_prepare(p, v) for p, v in zip(spec.outputs, result)]
    return encode(spec.output_types, values)


def decode_return(spec: FunctionSpec, data: bytes) -> Any:
    if not spec.outputs:
        return None
    values = decode(spec.output_types, data)
    values = tuple(_normalize(p, v) for p, v in zip(spec.outputs, values))
    if len(values) == 1:
        return values[0]
    return values
