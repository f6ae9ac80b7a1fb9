"""
Signature Functions
===================
Signature computation and verification for canonical payloads.

The signature is an unkeyed MD5 fingerprint of the canonical payload. It
detects accidental or naive tampering and keys the replay guard; it is not
a secret-based MAC. Kept as-is for compatibility with existing clients.
"""

import hashlib
import hmac
from dataclasses import dataclass

SIGNATURE_ALGORITHM = "md5"


@dataclass(frozen=True)
class SignatureCheck:
    """Outcome of a signature check, carrying the computed hash either way."""
    valid: bool
    computed: str


def compute_signature(payload: bytes) -> str:
    """
    Compute the signature of a canonical payload.
    
    Args:
        payload: Canonical payload bytes
        
    Returns:
        Uppercase hex MD5 digest
    """
    return hashlib.md5(payload).hexdigest().upper()


def verify_signature(payload: bytes, provided_signature: str) -> bool:
    """Verify a supplied signature with an exact, constant-time comparison."""
    return SignatureVerifier().check(payload, provided_signature).valid


class SignatureVerifier:
    """Recomputes the expected signature and compares it to the supplied one."""

    def check(self, payload: bytes, provided_signature: str) -> SignatureCheck:
        computed = compute_signature(payload)
        if not isinstance(provided_signature, str):
            return SignatureCheck(valid=False, computed=computed)
        valid = hmac.compare_digest(
            computed.encode("ascii"),
            provided_signature.encode("utf-8"),
        )
        return SignatureCheck(valid=valid, computed=computed)

    def verify(self, payload: bytes, provided_signature: str) -> bool:
        return self.check(payload, provided_signature).valid
