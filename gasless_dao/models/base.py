"""
Base Models for the Gasless DAO

Shared field types and enums used by the forwarder, the voting ledger and the
relay layer. Addresses are normalised to EIP-55 checksum form on the way in,
uint256 values accept ints or decimal strings (the relay wire format), and
byte payloads accept raw bytes or 0x-prefixed hex.
"""

from enum import IntEnum
from typing import Annotated, Any

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
UINT256_MAX = 2**256 - 1
ADDRESS_LENGTH = 20


def normalize_address(value: Any) -> str:
    """Return the checksum form of an address, rejecting anything else."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != ADDRESS_LENGTH:
            raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(value)}")
        value = "0x" + bytes(value).hex()
    if not isinstance(value, str) or not is_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return to_checksum_address(value)


def parse_uint256(value: Any) -> int:
    """Parse an int or decimal string into a uint256."""
    if isinstance(value, bool):
        raise ValueError("Booleans are not valid uint256 values")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError(f"Expected a decimal string, got {value!r}")
        value = int(text)
    if not isinstance(value, int):
        raise ValueError(f"Expected an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"Value {value} out of uint256 range")
    return value


def parse_bytes(value: Any) -> bytes:
    """Parse raw bytes or a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        text = value[2:] if value[:2] in ("0x", "0X") else value
        try:
            return bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid hex payload: {e}") from e
    raise ValueError(f"Expected bytes or hex string, got {type(value).__name__}")


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


Address = Annotated[str, BeforeValidator(normalize_address)]

Uint256 = Annotated[int, BeforeValidator(parse_uint256)]

HexBytes = Annotated[
    bytes,
    BeforeValidator(parse_bytes),
    PlainSerializer(to_hex, return_type=str, when_used="json"),
]


class VoteType(IntEnum):
    """
    Ballot choice. Values match the uint8 encoding used on the wire.
    """

    ABSTAIN = 0
    FOR = 1
    AGAINST = 2


class DAOBaseModel(BaseModel):
    """Base model for ledger entities."""

    model_config = ConfigDict(populate_by_name=True)
