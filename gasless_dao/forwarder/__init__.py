"""
Meta-transaction Forwarder Package

Lets users act without paying fees: they sign a ForwardRequest off-chain and
a relayer submits it to the MinimalForwarder, which verifies the signature,
spends the user's sequence number and calls the destination with the user's
address appended.

- MinimalForwarder: getNonce / verify / execute
- SequenceStore: per-user sequence numbers (memory or Redis)
- ECDSARecoverer: canonical secp256k1 signature recovery
- signing helpers: build and sign requests with eth_account
"""

from .digest import (
    DOMAIN_TYPE,
    DOMAIN_TYPEHASH,
    FORWARD_REQUEST_TYPE,
    FORWARD_REQUEST_TYPEHASH,
    domain_separator,
    request_digest,
    struct_hash,
    typed_data_digest,
)
from .forwarder import (
    FORWARDER_ABI,
    InsufficientForwarderBalance,
    InvalidMetaTransaction,
    MinimalForwarder,
)
from .recovery import (
    ECDSARecoverer,
    InvalidSignatureError,
    SignatureRecoverer,
    split_signature,
)
from .sequence_store import (
    SequenceStore,
    close_sequence_store,
    get_sequence_store,
    init_sequence_store,
)
from .signing import (
    build_domain,
    build_forward_request,
    build_meta_transaction,
    sign_forward_request,
    typed_data,
)

__all__ = [
    # Digest
    "DOMAIN_TYPE",
    "DOMAIN_TYPEHASH",
    "FORWARD_REQUEST_TYPE",
    "FORWARD_REQUEST_TYPEHASH",
    "domain_separator",
    "request_digest",
    "struct_hash",
    "typed_data_digest",
    # Contract
    "FORWARDER_ABI",
    "InsufficientForwarderBalance",
    "InvalidMetaTransaction",
    "MinimalForwarder",
    # Recovery
    "ECDSARecoverer",
    "InvalidSignatureError",
    "SignatureRecoverer",
    "split_signature",
    # Sequence store
    "SequenceStore",
    "close_sequence_store",
    "get_sequence_store",
    "init_sequence_store",
    # Signing
    "build_domain",
    "build_forward_request",
    "build_meta_transaction",
    "sign_forward_request",
    "typed_data",
]
