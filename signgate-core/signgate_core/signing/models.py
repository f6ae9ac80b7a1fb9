"""
Signing Models
==============
Data models and enums for signed request evaluation.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass
from enum import Enum


class GateDecision(str, Enum):
    """Request gate decision types."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class RejectReason(str, Enum):
    """Reasons for rejecting a signed request."""
    MISSING_PARAMETERS = "missing_parameters"
    TAMPERED = "parameter_tampering"
    EXPIRED = "request_expired"
    DUPLICATE = "duplicate_submission"

    @property
    def code(self) -> int:
        return REJECT_CODES[self]

    @property
    def message(self) -> str:
        return REJECT_MESSAGES[self]


# Machine-readable codes shared with existing API consumers
REJECT_CODES: Dict[RejectReason, int] = {
    RejectReason.MISSING_PARAMETERS: 503,
    RejectReason.TAMPERED: 504,
    RejectReason.EXPIRED: 505,
    RejectReason.DUPLICATE: 555,
}

REJECT_MESSAGES: Dict[RejectReason, str] = {
    RejectReason.MISSING_PARAMETERS: "Missing required parameters",
    RejectReason.TAMPERED: "Parameter error",
    RejectReason.EXPIRED: "Request has expired",
    RejectReason.DUPLICATE: "Do not submit repeatedly",
}


@dataclass
class SignedRequest:
    """The distinguished fields of a guarded request plus its full parameter bag."""
    timestamp: Any
    token: str
    nonce: str
    signature: str
    params: Dict[str, Any]

    @classmethod
    def from_params(
        cls,
        params: Dict[str, Any],
        signature_field: str = "signature",
    ) -> "SignedRequest":
        return cls(
            timestamp=params.get("timestamp"),
            token=params.get("token"),
            nonce=params.get("nonce"),
            signature=params.get(signature_field),
            params=dict(params),
        )

    @property
    def timestamp_seconds(self) -> Optional[int]:
        """Timestamp as int, or None when it is not an integer."""
        try:
            return int(str(self.timestamp).strip())
        except (TypeError, ValueError):
            return None


@dataclass
class GateOutcome:
    """Result of a request gate evaluation."""
    decision: GateDecision
    reason: Optional[RejectReason] = None
    signature: Optional[str] = None  # computed hash, when hashing happened

    @classmethod
    def accepted(cls, signature: str) -> "GateOutcome":
        return cls(decision=GateDecision.ACCEPTED, signature=signature)

    @classmethod
    def rejected(
        cls,
        reason: RejectReason,
        signature: Optional[str] = None,
    ) -> "GateOutcome":
        return cls(decision=GateDecision.REJECTED, reason=reason, signature=signature)

    @property
    def is_accepted(self) -> bool:
        return self.decision == GateDecision.ACCEPTED

    @property
    def code(self) -> Optional[int]:
        return self.reason.code if self.reason else None

    @property
    def message(self) -> Optional[str]:
        return self.reason.message if self.reason else None
