"""
EIP-712 Digest Construction for Forward Requests

    domainSeparator = keccak(abi.encode(DOMAIN_TYPEHASH, keccak(name), keccak(version),
                                        chainId, verifyingContract))
    structHash      = keccak(abi.encode(FORWARD_REQUEST_TYPEHASH, from, to, value, gas,
                                        nonce, keccak(data)))
    digest          = keccak(0x1901 || domainSeparator || structHash)

The payload is hashed inside the struct hash, so the digest is a fixed 32
bytes whatever the calldata size. The result is bit-identical to what
eth_account.Account.sign_typed_data signs for the same domain and message.
"""

from eth_abi import encode
from eth_utils import keccak

from ..models.forwarder import ForwarderDomain, ForwardRequest

DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
FORWARD_REQUEST_TYPE = (
    "ForwardRequest(address from,address to,uint256 value,uint256 gas,uint256 nonce,bytes data)"
)

DOMAIN_TYPEHASH = keccak(text=DOMAIN_TYPE)
FORWARD_REQUEST_TYPEHASH = keccak(text=FORWARD_REQUEST_TYPE)

EIP712_PREFIX = b"\x19\x01"


def domain_separator(domain: ForwarderDomain) -> bytes:
    return keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                DOMAIN_TYPEHASH,
                keccak(text=domain.name),
                keccak(text=domain.version),
                domain.chain_id,
                domain.verifying_contract,
            ],
        )
    )


def struct_hash(request: ForwardRequest) -> bytes:
    return keccak(
        encode(
            ["bytes32", "address", "address", "uint256", "uint256", "uint256", "bytes32"],
            [
                FORWARD_REQUEST_TYPEHASH,
                request.from_,
                request.to,
                request.value,
                request.gas,
                request.nonce,
                keccak(request.data),
            ],
        )
    )


def typed_data_digest(separator: bytes, hashed_struct: bytes) -> bytes:
    return keccak(EIP712_PREFIX + separator + hashed_struct)


def request_digest(request: ForwardRequest, domain: ForwarderDomain) -> bytes:
    """The 32-byte digest a requester signs for `request` under `domain`."""
    return typed_data_digest(domain_separator(domain), struct_hash(request))
