"""
Signature Recovery

The forwarder only needs one capability from elliptic-curve cryptography:
recover the signing address from a digest and a signature. It is injected as
a SignatureRecoverer so the forwarder logic can be exercised with fakes.

ECDSARecoverer accepts only canonical 65-byte secp256k1 signatures
(r || s || v): v must be 27 or 28, r and s must be in range and s must be in
the lower half of the curve order. The high-s twin of a valid signature
recovers the same address, so accepting it would give every signature a
second, distinct encoding.
"""

from typing import Protocol, runtime_checkable

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
SECP256K1_HALF_N = SECP256K1_N // 2

SIGNATURE_LENGTH = 65
DIGEST_LENGTH = 32
VALID_V = (27, 28)


class InvalidSignatureError(ValueError):
    """Raised for malformed, non-canonical or unrecoverable signatures."""
    pass


@runtime_checkable
class SignatureRecoverer(Protocol):
    """Recovers the signer address of a 32-byte digest."""

    def recover(self, digest: bytes, signature: bytes) -> str:
        ...


def split_signature(signature: bytes) -> tuple[int, int, int]:
    """
    Split and validate a 65-byte signature into (v, r, s).

    Raises:
        InvalidSignatureError: wrong length, bad recovery id, or r/s outside
        the canonical range
    """
    if len(signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureError(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    r = int.from_bytes(signature[0:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]

    if v not in VALID_V:
        raise InvalidSignatureError(f"Invalid recovery id v={v}")
    if not 0 < r < SECP256K1_N:
        raise InvalidSignatureError("Signature r value out of range")
    if not 0 < s <= SECP256K1_HALF_N:
        raise InvalidSignatureError("Signature s value is not canonical (high-s or zero)")
    return v, r, s


class ECDSARecoverer:
    """secp256k1 public key recovery backed by eth_keys."""

    def recover(self, digest: bytes, signature: bytes) -> str:
        if len(digest) != DIGEST_LENGTH:
            raise InvalidSignatureError(f"Digest must be {DIGEST_LENGTH} bytes")
        v, r, s = split_signature(signature)
        try:
            signature_obj = keys.Signature(vrs=(v - 27, r, s))
            public_key = signature_obj.recover_public_key_from_msg_hash(digest)
        except (BadSignature, KeyValidationError) as e:
            raise InvalidSignatureError(f"Signature recovery failed: {e}") from e
        return public_key.to_checksum_address()
