"""Redis client for scheduler state."""

import redis
from typing import Optional
from ..config import settings


class RedisClient:
    """Redis client wrapper for state shared between beat ticks."""

    def __init__(self, url: Optional[str] = None):
        self._client = redis.from_url(
            url or settings.redis_url,
            decode_responses=True,
            encoding="utf-8"
        )

    def set(self, key: str, value: str) -> bool:
        """Set key without expiration."""
        return self._client.set(key, value)

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        return self._client.get(key)

    def delete(self, key: str) -> int:
        """Delete key."""
        return self._client.delete(key)

    def ping(self) -> bool:
        return self._client.ping()

    def close(self):
        """Close Redis connection."""
        self._client.close()


# Global Redis client instance (connects lazily on first command)
redis_client = RedisClient()
