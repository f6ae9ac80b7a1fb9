"""
In-Memory Replay Guard
======================
Process-local replay guard for single-instance deployments and tests.
"""

import heapq
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple
import structlog

from ..config import GateConfig

logger = structlog.get_logger(__name__)


class InMemoryReplayGuard:
    """
    In-memory replay guard with per-key expiry.

    Scope is the current process only. Use RedisReplayGuard when several
    gateway instances share traffic.
    """

    def __init__(
        self,
        max_entries: int = 100000,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            max_entries: Memory bound; earliest-expiring entries are evicted first
            clock: Monotonic time source in seconds
        """
        self.max_entries = max_entries
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._entries: Dict[str, float] = {}  # key -> expires_at
        self._expiry: List[Tuple[float, str]] = []  # heap of (expires_at, key)

    @classmethod
    def from_config(
        cls,
        config: GateConfig,
        clock: Optional[Callable[[], float]] = None,
    ) -> "InMemoryReplayGuard":
        """Create a guard bounded by ``config.replay_max_entries``."""
        return cls(max_entries=config.replay_max_entries, clock=clock)

    def check_and_mark(self, key: str, ttl: int) -> bool:
        """
        Check whether key was seen and remember it if not.

        Args:
            key: Computed signature hash
            ttl: Seconds the key stays remembered

        Returns:
            True if the key was already seen within its TTL
        """
        now = self._clock()
        with self._lock:
            self._cleanup(now)

            if key in self._entries:
                logger.warning("replay_detected", key=key[:8])
                return True

            expires_at = now + ttl
            self._entries[key] = expires_at
            heapq.heappush(self._expiry, (expires_at, key))
            self._evict_if_needed()
            return False

    def __len__(self) -> int:
        with self._lock:
            self._cleanup(self._clock())
            return len(self._entries)

    def _pop_earliest(self) -> None:
        expires_at, key = heapq.heappop(self._expiry)
        if self._entries.get(key) == expires_at:
            del self._entries[key]

    def _cleanup(self, now: float) -> None:
        """Remove expired keys, earliest first. Caller holds the lock."""
        while self._expiry and self._expiry[0][0] <= now:
            self._pop_earliest()

    def _evict_if_needed(self) -> None:
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return
        while len(self._entries) > self.max_entries:
            self._pop_earliest()
        logger.warning("replay_guard_evicted", count=overflow, max_entries=self.max_entries)
