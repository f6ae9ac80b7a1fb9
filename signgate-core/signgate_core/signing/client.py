"""
Client Signing
==============
Helper for clients that need to send signed requests.
"""

import time
import uuid
from typing import Any, Dict, Mapping, Optional

from .canonical import canonicalize
from .signature import compute_signature


def generate_nonce() -> str:
    """Generate a unique nonce for request signing."""
    return uuid.uuid4().hex


def create_signed_params(
    params: Mapping[str, Any],
    token: str,
    timestamp: Optional[int] = None,
    nonce: Optional[str] = None,
    signature_field: str = "signature",
) -> Dict[str, Any]:
    """
    Create the parameter set for a signed request.
    
    Args:
        params: Business parameters
        token: Session token of the caller
        timestamp: Unix timestamp (defaults to now)
        nonce: Unique request identifier (defaults to a random one)
        signature_field: Name of the signature parameter
        
    Returns:
        New dictionary with token, timestamp, nonce and signature added
    """
    signed = dict(params)
    signed["token"] = token
    signed["timestamp"] = str(timestamp if timestamp is not None else int(time.time()))
    signed["nonce"] = nonce or generate_nonce()
    signed.pop(signature_field, None)
    signed[signature_field] = compute_signature(canonicalize(signed, signature_field))
    return signed
