"""
Signed Request Middleware
=========================
Applies the request gate alone to every non-public path of an app.

Use this when routes are plain FastAPI/Starlette endpoints rather than
ApiControllers. Login and permission checks stay with the app.

Usage:
    app.add_middleware(
        SignedRequestMiddleware,
        gate=RequestGate(RedisReplayGuard.from_url(settings.REDIS_URL)),
        public_paths={"/health", "/login"},
    )
"""

import time
from typing import Optional, Set

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from .asgi import read_params
from .config import ResponseConfig
from .errors import SignGateError
from .lang import Translator, detect_lang
from .response import ResponseEnvelope, render_response
from .signing.gate import RequestGate

logger = structlog.get_logger(__name__)


class SignedRequestMiddleware(BaseHTTPMiddleware):
    """Rejects unsigned, tampered, expired or replayed requests."""

    # Paths that bypass the gate (health checks, etc.)
    DEFAULT_PUBLIC_PATHS: Set[str] = {
        "/health",
        "/ready",
        "/live",
        "/metrics",
    }

    def __init__(
        self,
        app,
        gate: RequestGate,
        public_paths: Optional[Set[str]] = None,
        response_config: Optional[ResponseConfig] = None,
    ):
        super().__init__(app)
        self.gate = gate
        self.public_paths = public_paths if public_paths is not None else self.DEFAULT_PUBLIC_PATHS
        self.response_config = response_config or ResponseConfig()

    def _is_public_path(self, path: str) -> bool:
        """Check if path is public (bypasses the gate)."""
        path_normalized = path.rstrip("/") or "/"
        return path_normalized in self.public_paths or path in self.public_paths

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if self._is_public_path(path) or request.method == "OPTIONS":
            return await call_next(request)

        params = await read_params(request)
        request_time = int(time.time())
        envelope = ResponseEnvelope(
            config=self.response_config,
            request_time=request_time,
            translate=Translator(detect_lang(params, dict(request.headers))),
        )
        callback = params.get(self.response_config.jsonp_handler)
        if callback:
            envelope.response_type = "jsonp"

        try:
            outcome = await run_in_threadpool(self.gate.evaluate, params, request_time)
        except SignGateError as e:
            logger.error("signed_request_gate_failed", path=path, error=e.message)
            return render_response(
                envelope.error("Service unavailable", None, 500),
                self.response_config,
                callback,
            )

        if not outcome.is_accepted:
            return render_response(
                envelope.error(outcome.message, None, outcome.code),
                self.response_config,
                callback,
            )

        request.state.signature = outcome.signature
        return await call_next(request)
