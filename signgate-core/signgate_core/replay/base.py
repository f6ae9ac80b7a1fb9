"""
Replay Guard Interface
======================
Protocol shared by the replay guard backends.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReplayGuard(Protocol):
    """
    Time-bounded "seen" cache keyed by signature hash.

    Implementations must perform the test and the insert as one atomic step
    so two concurrent identical requests cannot both be accepted. Entries
    expire on their own; there is no remove operation.
    """

    def check_and_mark(self, key: str, ttl: int) -> bool:
        """Return True if key was already seen, otherwise remember it for ttl seconds."""
        ...
