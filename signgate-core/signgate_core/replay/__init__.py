"""
Replay Guards
=============
Time-bounded "seen" caches that reject duplicate signed requests.
"""

from .base import ReplayGuard
from .in_memory import InMemoryReplayGuard
from .redis_guard import RedisReplayGuard

__all__ = [
    "ReplayGuard",
    "InMemoryReplayGuard",
    "RedisReplayGuard",
]
