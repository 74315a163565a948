"""
Minimal Forwarder

Verifies EIP-712 signed ForwardRequests and relays them to their destination
with the requester's address appended to the calldata, so a destination that
trusts this forwarder can recover the original caller.

Execution order for `execute`:
1. Signature and sequence number must verify (InvalidMetaTransaction).
2. The requester's sequence number is advanced. This is committed to the
   SequenceStore and is NOT undone if anything below fails: a signed request
   buys exactly one attempt.
3. Forwarded value must be covered by the forwarder's balance
   (InsufficientForwarderBalance).
4. The destination is called with `data || from`.
5. A downstream revert is re-raised unchanged.
"""

from typing import Any

import structlog

from ..chain.contract import Contract
from ..chain.errors import ContractRevert
from ..models.base import normalize_address
from ..models.forwarder import FORWARD_REQUEST_FIELDS, ForwarderDomain, ForwardRequest
from .digest import domain_separator as compute_domain_separator
from .digest import request_digest
from .recovery import ECDSARecoverer, InvalidSignatureError, SignatureRecoverer
from .sequence_store import SequenceStore

logger = structlog.get_logger(__name__)

DEFAULT_FORWARDER_NAME = "MinimalForwarder"
DEFAULT_FORWARDER_VERSION = "0.0.1"


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════════════════════


class InvalidMetaTransaction(ContractRevert):
    """Signature does not match `from` or the nonce is not current."""
    pass


class InsufficientForwarderBalance(ContractRevert):
    """The forwarder cannot cover the value a request forwards."""
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# ABI
# ═══════════════════════════════════════════════════════════════════════════════

_FORWARD_REQUEST_PARAM: dict[str, Any] = {
    "name": "req",
    "type": "tuple",
    "components": FORWARD_REQUEST_FIELDS,
}

FORWARDER_ABI: list[dict[str, Any]] = [
    {
        "inputs": [{"name": "from", "type": "address"}],
        "name": "getNonce",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [_FORWARD_REQUEST_PARAM, {"name": "signature", "type": "bytes"}],
        "name": "verify",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [_FORWARD_REQUEST_PARAM, {"name": "signature", "type": "bytes"}],
        "name": "execute",
        "outputs": [{"name": "", "type": "bool"}, {"name": "", "type": "bytes"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "domainSeparator",
        "outputs": [{"name": "", "type": "bytes32"}],
        "stateMutability": "view",
        "type": "function",
    },
]


# ═══════════════════════════════════════════════════════════════════════════════
# CONTRACT
# ═══════════════════════════════════════════════════════════════════════════════


class MinimalForwarder(Contract):
    """
    Trusted forwarder for gasless calls.

    The EIP-712 domain is fixed at deployment from the ledger's chain id and
    the forwarder's own address. Signature recovery and sequence storage are
    injected so either can be replaced (fake recoverers in tests, a Redis
    backed store for relayers sharing counters).

    Example:
        forwarder = MinimalForwarder()
        chain.deploy(forwarder)
        nonce = forwarder.get_nonce(alice)
    """

    ABI = FORWARDER_ABI
    FUNCTIONS = {
        "getNonce": "get_nonce",
        "verify": "verify",
        "execute": "execute",
        "domainSeparator": "domain_separator",
    }
    STORAGE = ()

    def __init__(
        self,
        name: str = DEFAULT_FORWARDER_NAME,
        version: str = DEFAULT_FORWARDER_VERSION,
        sequence_store: SequenceStore | None = None,
        recoverer: SignatureRecoverer | None = None,
    ) -> None:
        super().__init__()
        self.name = name
        self.version = version
        self.sequence_store = sequence_store or SequenceStore()
        self.recoverer = recoverer or ECDSARecoverer()
        self.domain: ForwarderDomain | None = None
        self._domain_separator = b""

    def on_deploy(self, chain, address: str) -> None:
        super().on_deploy(chain, address)
        self.domain = ForwarderDomain(
            name=self.name,
            version=self.version,
            chain_id=chain.chain_id,
            verifying_contract=address,
        )
        self._domain_separator = compute_domain_separator(self.domain)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_nonce(self, address: str) -> int:
        return self.sequence_store.current(normalize_address(address))

    def domain_separator(self) -> bytes:
        self._require_chain()
        return self._domain_separator

    def verify(self, request: ForwardRequest | tuple, signature: bytes) -> bool:
        """True iff `signature` is `request.from_`'s and the nonce is current."""
        request = self._as_request(request)
        valid, reason = self._check(request, signature)
        if valid:
            logger.debug("meta_tx_verified", sender=request.from_, nonce=request.nonce)
        else:
            logger.info(
                "meta_tx_rejected",
                sender=request.from_,
                nonce=request.nonce,
                reason=reason,
            )
        return valid

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, request: ForwardRequest | tuple, signature: bytes) -> tuple[bool, bytes]:
        request = self._as_request(request)
        if not self.verify(request, signature):
            raise InvalidMetaTransaction(
                "Signature does not match request",
                sender=request.from_,
                nonce=request.nonce,
            )

        # Another relayer sharing the backend may have spent this nonce
        # between the check above and this increment.
        if self.sequence_store.increment(request.from_) != request.nonce + 1:
            raise InvalidMetaTransaction(
                "Nonce already spent",
                sender=request.from_,
                nonce=request.nonce,
            )

        if request.value > 0:
            available = self.get_contract_balance()
            if available < request.value:
                raise InsufficientForwarderBalance(required=request.value, available=available)

        result = self._call(
            request.to,
            data=request.data + bytes.fromhex(request.from_[2:]),
            value=request.value,
            gas=request.gas,
        )
        if not result.success:
            logger.info(
                "meta_tx_downstream_failed",
                sender=request.from_,
                to=request.to,
                nonce=request.nonce,
                error=result.error.name if result.error else None,
            )
            raise result.error

        logger.info(
            "meta_tx_executed",
            sender=request.from_,
            to=request.to,
            nonce=request.nonce,
            value=request.value,
        )
        return True, result.return_data

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _as_request(request: ForwardRequest | tuple) -> ForwardRequest:
        if isinstance(request, ForwardRequest):
            return request
        return ForwardRequest.from_abi_tuple(request)

    def _check(self, request: ForwardRequest, signature: bytes) -> tuple[bool, str | None]:
        if self.domain is None:
            return False, "forwarder not deployed"

        expected_nonce = self.get_nonce(request.from_)
        if request.nonce != expected_nonce:
            return False, f"nonce {request.nonce} != current {expected_nonce}"

        digest = request_digest(request, self.domain)
        try:
            signer = self.recoverer.recover(digest, bytes(signature))
        except InvalidSignatureError as e:
            return False, str(e)

        if normalize_address(signer) != request.from_:
            return False, f"recovered signer {signer} is not {request.from_}"
        return True, None
