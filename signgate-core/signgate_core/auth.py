"""
Auth Collaborator Interface
===========================
What the controller pipeline needs from the session/permission service.

Token storage and permission rules live in the service implementing this
protocol; the pipeline only asks whether the current action needs login and
whether the caller may run it.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class AuthService(Protocol):
    def set_request_uri(self, path: str) -> None:
        """Remember the ``controller/action`` path of the current request."""
        ...

    def init(self, token: str) -> bool:
        """Load the session bound to a token."""
        ...

    def is_login(self) -> bool:
        ...

    def match(self, patterns: Sequence[str], path: Optional[str] = None) -> bool:
        """Whether the action (or the given path) is named in patterns."""
        ...

    def check(self, path: str) -> bool:
        """Whether the logged in user holds the permission for path."""
        ...
