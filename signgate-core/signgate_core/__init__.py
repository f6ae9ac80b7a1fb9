"""
signgate Core Library
=====================
Signed request guard for API gateways: canonical payload signatures,
expiry and replay checks, action hooks and uniform response envelopes.
"""

__version__ = "0.1.0"

# Configuration
from signgate_core.config import GateConfig, ResponseConfig

# Errors
from signgate_core.errors import (
    SignGateError,
    ReplayStoreUnavailable,
    ConfigurationError,
)

# Signing
from signgate_core.signing import (
    GateDecision,
    GateOutcome,
    RejectReason,
    SignedRequest,
    RequestGate,
    SignatureVerifier,
    canonicalize,
    compute_signature,
    verify_signature,
    create_signed_params,
)

# Replay
from signgate_core.replay import (
    ReplayGuard,
    InMemoryReplayGuard,
    RedisReplayGuard,
)

# Responses
from signgate_core.response import (
    ApiResult,
    ResponseEnvelope,
    render_response,
    status_for_code,
)

# Hooks
from signgate_core.hooks import HookSpec, ActionHookDispatcher, parse_hooks

# Controllers
from signgate_core.auth import AuthService
from signgate_core.controller import ApiController, RequestContext

__all__ = [
    "__version__",
    # Configuration
    "GateConfig",
    "ResponseConfig",
    # Errors
    "SignGateError",
    "ReplayStoreUnavailable",
    "ConfigurationError",
    # Signing
    "GateDecision",
    "GateOutcome",
    "RejectReason",
    "SignedRequest",
    "RequestGate",
    "SignatureVerifier",
    "canonicalize",
    "compute_signature",
    "verify_signature",
    "create_signed_params",
    # Replay
    "ReplayGuard",
    "InMemoryReplayGuard",
    "RedisReplayGuard",
    # Responses
    "ApiResult",
    "ResponseEnvelope",
    "render_response",
    "status_for_code",
    # Hooks
    "HookSpec",
    "ActionHookDispatcher",
    "parse_hooks",
    # Controllers
    "AuthService",
    "ApiController",
    "RequestContext",
]
