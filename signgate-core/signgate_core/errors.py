"""
Gate Exceptions
===============
Exception classes for infrastructure faults around the request gate.

Guard rejections are not exceptions; they are returned as GateOutcome and
ApiResult values.
"""

from typing import Optional


class SignGateError(Exception):
    """Base exception for signgate infrastructure faults."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class ReplayStoreUnavailable(SignGateError):
    """Raised when the replay store cannot be reached or answered badly."""
    pass


class ConfigurationError(SignGateError):
    """Raised when gate or response configuration is invalid."""
    pass
