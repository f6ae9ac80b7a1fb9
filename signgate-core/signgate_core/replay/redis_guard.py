"""
Redis Replay Guard
==================
Redis-backed replay guard shared by every gateway instance.
"""

import redis
import structlog

from ..config import GateConfig
from ..errors import ReplayStoreUnavailable

logger = structlog.get_logger(__name__)


class RedisReplayGuard:
    """
    Redis-backed replay guard.
    
    Uses a single ``SET key 1 NX EX ttl`` so the check and the insert are
    atomic across instances. Expiry is left to Redis.
    """
    
    def __init__(self, redis_client, key_prefix: str = "signgate:replay:"):
        """
        Args:
            redis_client: Synchronous Redis client
            key_prefix: Namespace for replay keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
    
    @classmethod
    def from_url(cls, redis_url: str, key_prefix: str = "signgate:replay:") -> "RedisReplayGuard":
        """Create a guard from a Redis URL."""
        return cls(redis.from_url(redis_url, decode_responses=True), key_prefix=key_prefix)
    
    @classmethod
    def from_config(cls, redis_client, config: GateConfig) -> "RedisReplayGuard":
        """Create a guard using ``config.replay_key_prefix``."""
        return cls(redis_client, key_prefix=config.replay_key_prefix)
    
    def get_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"
    
    def check_and_mark(self, key: str, ttl: int) -> bool:
        """
        Check whether key was seen and remember it if not.
        
        Raises:
            ReplayStoreUnavailable: If Redis cannot be reached
        """
        try:
            stored = self.redis.set(self.get_key(key), 1, nx=True, ex=int(ttl))
        except redis.RedisError as e:
            logger.error("replay_store_unavailable", error=str(e))
            raise ReplayStoreUnavailable("replay store unavailable", cause=e) from e
        
        if not stored:
            logger.warning("replay_detected", key=key[:8])
            return True
        return False
