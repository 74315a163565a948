"""
Forwarder Models

A ForwardRequest is built per call, signed off-chain as EIP-712 typed data,
and never persisted. Its six fields fully determine the digest a user signs.
"""

from typing import Any

from pydantic import ConfigDict, Field

from .base import Address, DAOBaseModel, HexBytes, Uint256, to_hex

FORWARD_REQUEST_FIELDS: list[dict[str, str]] = [
    {"name": "from", "type": "address"},
    {"name": "to", "type": "address"},
    {"name": "value", "type": "uint256"},
    {"name": "gas", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "data", "type": "bytes"},
]

EIP712_DOMAIN_FIELDS: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


class ForwardRequest(DAOBaseModel):
    """
    A call a user authorises a relayer to submit on their behalf.

    `from_` is serialised under its wire name `from`. `nonce` must equal the
    forwarder's current sequence number for `from_` when the request is relayed.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: Address = Field(alias="from", description="Requester (signer) address")
    to: Address = Field(description="Destination contract")
    value: Uint256 = Field(default=0, description="Native value to forward (wei)")
    gas: Uint256 = Field(description="Gas allowance for the downstream call")
    nonce: Uint256 = Field(description="Requester's sequence number")
    data: HexBytes = Field(default=b"", description="Calldata for the destination")

    def as_abi_tuple(self) -> tuple[str, str, int, int, int, bytes]:
        return (self.from_, self.to, self.value, self.gas, self.nonce, self.data)

    @classmethod
    def from_abi_tuple(cls, values: tuple[Any, ...]) -> "ForwardRequest":
        from_, to, value, gas, nonce, data = values
        return cls(from_=from_, to=to, value=value, gas=gas, nonce=nonce, data=data)

    def to_message(self) -> dict[str, Any]:
        """Message dict in the shape eth_account's typed-data signer expects."""
        return {
            "from": self.from_,
            "to": self.to,
            "value": self.value,
            "gas": self.gas,
            "nonce": self.nonce,
            "data": self.data,
        }

    def to_json_payload(self) -> dict[str, str]:
        """Relay wire format: integers as decimal strings, data as 0x hex."""
        return {
            "from": self.from_,
            "to": self.to,
            "value": str(self.value),
            "gas": str(self.gas),
            "nonce": str(self.nonce),
            "data": to_hex(self.data),
        }


class ForwarderDomain(DAOBaseModel):
    """EIP-712 domain binding signatures to one forwarder on one network."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    version: str
    chain_id: Uint256 = Field(alias="chainId")
    verifying_contract: Address = Field(alias="verifyingContract")

    def to_eip712(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


class SignedForwardRequest(DAOBaseModel):
    """A request together with the requester's 65-byte signature."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    request: ForwardRequest
    signature: HexBytes

    def to_json_payload(self) -> dict[str, Any]:
        return {
            "request": self.request.to_json_payload(),
            "signature": to_hex(self.signature),
        }
