"""
Relay Service

The relayer is the party that pays for gasless actions. It takes a signed
ForwardRequest from a client and submits it to the forwarder's `execute` from
its own account. The forwarder does all of the authorisation; the relayer
only screens requests that are certain to fail so it does not pay for them:

1. The request nonce must equal the forwarder's current nonce for `from`.
2. A read-only `verify` call is made as a pre-flight. A failing pre-flight is
   logged and the request is still submitted, the forwarder has the final say.
3. `execute` is submitted without value and with the configured gas limit.
"""

from dataclasses import dataclass
from typing import Any

import structlog
from eth_account import Account

from ..chain.errors import ContractRevert
from ..chain.handle import ContractHandle
from ..chain.local_chain import LocalChain
from ..config import DAOSettings
from ..forwarder.forwarder import FORWARDER_ABI
from ..models.base import normalize_address, parse_bytes
from ..models.forwarder import ForwardRequest
from ..monitoring.logging import log_duration

logger = structlog.get_logger(__name__)

DEFAULT_RELAY_GAS_LIMIT = 3_000_000


class RelayError(Exception):
    """Base exception for relay errors."""
    pass


class RelayerNotConfiguredError(RelayError):
    """Raised when no relayer account is configured."""
    pass


class NonceMismatchError(RelayError):
    """Raised when a request's nonce is not the forwarder's current nonce."""

    def __init__(self, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(f"Nonce mismatch: expected {expected}, received {received}")


@dataclass
class RelayReceipt:
    """Result of a successfully relayed request."""

    tx_hash: str
    block_number: int
    success: bool = True


class RelayService:
    """
    Submits signed forward requests on behalf of users.

    Example:
        service = RelayService(chain, forwarder_address, relayer_address)
        receipt = service.relay(signed.request, signed.signature)
    """

    def __init__(
        self,
        chain: LocalChain,
        forwarder_address: str,
        relayer_address: str | None,
        gas_limit: int = DEFAULT_RELAY_GAS_LIMIT,
    ):
        self.chain = chain
        self.forwarder = ContractHandle(chain, forwarder_address, FORWARDER_ABI)
        self.relayer_address = normalize_address(relayer_address) if relayer_address else None
        self.gas_limit = gas_limit

    @classmethod
    def from_settings(
        cls,
        chain: LocalChain,
        forwarder_address: str,
        settings: DAOSettings,
    ) -> "RelayService":
        """Build a service whose relayer account is derived from the configured key."""
        relayer_address = None
        if settings.relayer_private_key:
            relayer_address = Account.from_key(settings.relayer_private_key).address
        return cls(
            chain,
            forwarder_address,
            relayer_address,
            gas_limit=settings.relay_gas_limit,
        )

    @property
    def is_configured(self) -> bool:
        return self.relayer_address is not None

    def get_nonce(self, address: str) -> int:
        return self.forwarder.call("getNonce", normalize_address(address))

    def relay(self, request: ForwardRequest | dict[str, Any], signature: bytes | str) -> RelayReceipt:
        """
        Relay a signed request through the forwarder.

        Raises:
            RelayerNotConfiguredError: No relayer account
            NonceMismatchError: The request nonce is not current
            ContractRevert: The forwarder or the destination reverted
        """
        if self.relayer_address is None:
            raise RelayerNotConfiguredError("Relayer account is not configured")

        if not isinstance(request, ForwardRequest):
            request = ForwardRequest.model_validate(request)
        signature = parse_bytes(signature)

        current_nonce = self.get_nonce(request.from_)
        if request.nonce != current_nonce:
            logger.info(
                "relay_nonce_mismatch",
                sender=request.from_,
                expected=current_nonce,
                received=request.nonce,
            )
            raise NonceMismatchError(expected=current_nonce, received=request.nonce)

        self._preflight(request, signature)

        with log_duration(logger, "relay_submit", sender=request.from_, nonce=request.nonce):
            receipt = self.forwarder.transact(
                "execute",
                request,
                signature,
                sender=self.relayer_address,
                gas=self.gas_limit,
            )
        logger.info(
            "relay_submitted",
            sender=request.from_,
            to=request.to,
            nonce=request.nonce,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
        )
        return RelayReceipt(tx_hash=receipt.tx_hash, block_number=receipt.block_number)

    def _preflight(self, request: ForwardRequest, signature: bytes) -> None:
        try:
            verified = self.forwarder.call("verify", request, signature, sender=self.relayer_address)
        except ContractRevert as e:
            logger.warning("relay_preflight_failed", sender=request.from_, error=e.message)
            return
        if not verified:
            logger.warning("relay_preflight_failed", sender=request.from_, error="verify returned false")
