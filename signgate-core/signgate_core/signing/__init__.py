"""
Signed Request Module
=====================
Canonical payloads, signatures and the request gate.
"""

from .models import (
    GateDecision,
    GateOutcome,
    RejectReason,
    SignedRequest,
    REJECT_CODES,
)
from .canonical import canonicalize, encode_json, natural_compare, natural_sort_key
from .signature import (
    SignatureCheck,
    SignatureVerifier,
    compute_signature,
    verify_signature,
    SIGNATURE_ALGORITHM,
)
from .gate import RequestGate
from .client import create_signed_params, generate_nonce

__all__ = [
    # Models
    "GateDecision",
    "GateOutcome",
    "RejectReason",
    "SignedRequest",
    "REJECT_CODES",
    # Canonical payload
    "canonicalize",
    "encode_json",
    "natural_compare",
    "natural_sort_key",
    # Signature
    "SignatureCheck",
    "SignatureVerifier",
    "compute_signature",
    "verify_signature",
    "SIGNATURE_ALGORITHM",
    # Gate
    "RequestGate",
    # Client
    "create_signed_params",
    "generate_nonce",
]
