"""
Data models for the gasless DAO: forwarder requests, proposals, votes,
events and ledger receipts.
"""

from .base import (
    ADDRESS_LENGTH,
    UINT256_MAX,
    ZERO_ADDRESS,
    Address,
    DAOBaseModel,
    HexBytes,
    Uint256,
    VoteType,
    normalize_address,
    parse_bytes,
    parse_uint256,
    to_hex,
)
from .chain import EventLog, Receipt
from .events import (
    ContractEvent,
    FundsDeposited,
    ProposalCreated,
    ProposalExecuted,
    VoteCast,
    VoteChanged,
)
from .forwarder import (
    EIP712_DOMAIN_FIELDS,
    FORWARD_REQUEST_FIELDS,
    ForwarderDomain,
    ForwardRequest,
    SignedForwardRequest,
)
from .proposal import Proposal, ProposalState, VoteRecord

__all__ = [
    # Base
    "ADDRESS_LENGTH",
    "UINT256_MAX",
    "ZERO_ADDRESS",
    "Address",
    "DAOBaseModel",
    "HexBytes",
    "Uint256",
    "VoteType",
    "normalize_address",
    "parse_bytes",
    "parse_uint256",
    "to_hex",
    # Chain
    "EventLog",
    "Receipt",
    # Events
    "ContractEvent",
    "FundsDeposited",
    "ProposalCreated",
    "ProposalExecuted",
    "VoteCast",
    "VoteChanged",
    # Forwarder
    "EIP712_DOMAIN_FIELDS",
    "FORWARD_REQUEST_FIELDS",
    "ForwarderDomain",
    "ForwardRequest",
    "SignedForwardRequest",
    # Proposals
    "Proposal",
    "ProposalState",
    "VoteRecord",
]
