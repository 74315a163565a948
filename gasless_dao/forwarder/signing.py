"""
Client-side Meta-transaction Signing

Helpers a wallet or client uses to produce what the relayer accepts:
a ForwardRequest plus an EIP-712 signature over it. Signing goes through
eth_account's typed-data signer, so the signatures are exactly those a
browser wallet (eth_signTypedData_v4) would produce.

Usage:
    domain = build_domain(forwarder_address, chain_id=31337)
    signed = build_meta_transaction(
        forwarder, dao, private_key, "vote", proposal_id, VoteType.FOR
    )
    relay_service.relay(signed.request, signed.signature)
"""

from typing import Any

from eth_account import Account

from ..chain.handle import ContractHandle
from ..models.forwarder import (
    EIP712_DOMAIN_FIELDS,
    FORWARD_REQUEST_FIELDS,
    ForwarderDomain,
    ForwardRequest,
    SignedForwardRequest,
)
from .forwarder import DEFAULT_FORWARDER_NAME, DEFAULT_FORWARDER_VERSION

DEFAULT_REQUEST_GAS = 300_000


def build_domain(
    verifying_contract: str,
    chain_id: int,
    name: str = DEFAULT_FORWARDER_NAME,
    version: str = DEFAULT_FORWARDER_VERSION,
) -> ForwarderDomain:
    return ForwarderDomain(
        name=name,
        version=version,
        chain_id=chain_id,
        verifying_contract=verifying_contract,
    )


def build_forward_request(
    sender: str,
    to: str,
    data: bytes,
    nonce: int,
    gas: int = DEFAULT_REQUEST_GAS,
    value: int = 0,
) -> ForwardRequest:
    return ForwardRequest(from_=sender, to=to, value=value, gas=gas, nonce=nonce, data=data)


def typed_data(request: ForwardRequest, domain: ForwarderDomain) -> dict[str, Any]:
    """Full EIP-712 document (types, primaryType, domain, message)."""
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_FIELDS,
            "ForwardRequest": FORWARD_REQUEST_FIELDS,
        },
        "primaryType": "ForwardRequest",
        "domain": domain.to_eip712(),
        "message": request.to_message(),
    }


def sign_forward_request(
    request: ForwardRequest,
    domain: ForwarderDomain,
    private_key: str | bytes,
) -> bytes:
    """Sign a request, returning the 65-byte r || s || v signature."""
    signed = Account.sign_typed_data(
        private_key,
        domain_data=domain.to_eip712(),
        message_types={"ForwardRequest": FORWARD_REQUEST_FIELDS},
        message_data=request.to_message(),
    )
    return bytes(signed.signature)


def build_meta_transaction(
    forwarder: ContractHandle,
    target: ContractHandle,
    private_key: str | bytes,
    fn_name: str,
    *args: Any,
    gas: int = DEFAULT_REQUEST_GAS,
    value: int = 0,
    name: str = DEFAULT_FORWARDER_NAME,
    version: str = DEFAULT_FORWARDER_VERSION,
) -> SignedForwardRequest:
    """
    Build and sign a gasless call of `target.fn_name(*args)`.

    The nonce is read from the forwarder at build time; the request is only
    valid until any other request from the same account is executed.
    """
    sender = Account.from_key(private_key).address
    nonce = forwarder.call("getNonce", sender)
    request = build_forward_request(
        sender,
        target.address,
        target.encode(fn_name, *args),
        nonce,
        gas=gas,
        value=value,
    )
    domain = build_domain(forwarder.address, forwarder.chain.chain_id, name=name, version=version)
    return SignedForwardRequest(
        request=request,
        signature=sign_forward_request(request, domain, private_key),
    )
