"""
Request Gate
============
Integrity, freshness and uniqueness check for guarded requests.
"""

import time
from typing import Any, Callable, Mapping, Optional
import structlog

from ..config import GateConfig
from ..metrics import record_decision
from ..replay.base import ReplayGuard
from .canonical import canonicalize
from .models import GateOutcome, RejectReason, SignedRequest
from .signature import SignatureVerifier

logger = structlog.get_logger(__name__)


def _is_blank(value: Any) -> bool:
    # "0" is treated as absent, like the legacy controller did
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "0")
    return not value


class RequestGate:
    """
    Runs the signed request checks in order and stops at the first failure:

    1. required fields present
    2. signature matches the canonical payload
    3. timestamp within the validity window (past side only)
    4. computed signature not seen before within the window
    """

    def __init__(
        self,
        replay_guard: ReplayGuard,
        config: Optional[GateConfig] = None,
        verifier: Optional[SignatureVerifier] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.replay_guard = replay_guard
        self.config = config or GateConfig()
        self.verifier = verifier or SignatureVerifier()
        self._clock = clock or time.time

    def evaluate(
        self,
        params: Mapping[str, Any],
        now: Optional[int] = None,
    ) -> GateOutcome:
        """
        Evaluate a request's parameters.
        
        Args:
            params: Full request parameter mapping, signature included
            now: Current unix time; defaults to the gate clock
            
        Returns:
            GateOutcome, accepted or rejected with a reason
        """
        started = time.perf_counter()
        outcome = self._evaluate(params, now)
        reason = outcome.reason.value if outcome.reason else "none"
        record_decision(outcome.decision.value, reason, time.perf_counter() - started)

        if outcome.is_accepted:
            logger.debug("gate_accepted", signature=outcome.signature[:8])
        else:
            logger.warning(
                "gate_rejected",
                reason=reason,
                code=outcome.code,
                nonce=str(params.get("nonce", ""))[:16],
            )
        return outcome

    def _evaluate(self, params: Mapping[str, Any], now: Optional[int]) -> GateOutcome:
        config = self.config
        if any(_is_blank(params.get(name)) for name in config.required_fields):
            return GateOutcome.rejected(RejectReason.MISSING_PARAMETERS)

        request = SignedRequest.from_params(params, config.signature_field)
        payload = canonicalize(request.params, config.signature_field)
        check = self.verifier.check(payload, request.signature)
        if not check.valid:
            return GateOutcome.rejected(RejectReason.TAMPERED, signature=check.computed)

        current = int(now if now is not None else self._clock())
        timestamp = request.timestamp_seconds
        if timestamp is None or timestamp < current - config.sign_expire:
            return GateOutcome.rejected(RejectReason.EXPIRED, signature=check.computed)

        if self.replay_guard.check_and_mark(check.computed, config.sign_expire):
            return GateOutcome.rejected(RejectReason.DUPLICATE, signature=check.computed)

        return GateOutcome.accepted(check.computed)
