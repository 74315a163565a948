"""
Trusted Forwarder Context

A contract behind a trusted forwarder sees the forwarder as its direct
caller. The forwarder appends the real requester's 20-byte address to the
calldata; the receiving contract reads it back only when the direct caller is
the forwarder it trusts. Calls from anyone else are taken at face value.
"""

from ..chain.contract import Contract
from ..models.base import ADDRESS_LENGTH, normalize_address


def resolve_caller(
    direct_caller: str,
    raw_payload: bytes,
    trusted_forwarder: str,
) -> tuple[str, bytes]:
    """
    Resolve the effective caller and the payload meant for the contract.

    Returns:
        (effective_caller, inner_payload). When `direct_caller` is the trusted
        forwarder and the payload carries at least an address, the last 20
        bytes are the caller and are stripped from the payload. Otherwise the
        direct caller and the untouched payload.
    """
    if (
        normalize_address(direct_caller) == normalize_address(trusted_forwarder)
        and len(raw_payload) >= ADDRESS_LENGTH
    ):
        return (
            normalize_address(raw_payload[-ADDRESS_LENGTH:]),
            raw_payload[:-ADDRESS_LENGTH],
        )
    return normalize_address(direct_caller), raw_payload


class ERC2771Context(Contract):
    """Contract base resolving msg.sender / msg.data through one trusted forwarder."""

    def __init__(self, trusted_forwarder: str) -> None:
        super().__init__()
        self._trusted_forwarder = normalize_address(trusted_forwarder)

    @property
    def trusted_forwarder(self) -> str:
        return self._trusted_forwarder

    def is_trusted_forwarder(self, forwarder: str) -> bool:
        return normalize_address(forwarder) == self._trusted_forwarder

    def _resolved(self) -> tuple[str, bytes]:
        message = self.msg
        return resolve_caller(message.sender, message.data, self._trusted_forwarder)

    def _msg_sender(self) -> str:
        return self._resolved()[0]

    def _msg_data(self) -> bytes:
        return self._resolved()[1]
