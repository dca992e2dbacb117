"""
Redis Storage Adapter - Redis-backed key/value storage.
"""

from typing import List, Optional
from session_auth.ports.storage_port import StoragePort


class RedisStorageAdapter(StoragePort):
    """
    Redis-backed storage.

    Values are plain Redis strings under a key prefix, with no TTL:
    a credential lives until logout or a detected authorization failure.
    """

    def __init__(
        self,
        redis_client=None,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "session_auth:",
    ):
        """
        Initialize Redis storage adapter.

        Args:
            redis_client: Redis client instance (redis.Redis)
            redis_url: Used to build a client when none is given
            prefix: Key prefix
        """
        self._redis = redis_client
        self._redis_url = redis_url
        self._prefix = prefix

    def _get_redis(self):
        """Lazy load Redis client."""
        if self._redis is None:
            import redis
            self._redis = redis.Redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    def _key(self, key: str) -> str:
        """Generate Redis key."""
        return f"{self._prefix}{key}"

    def get_item(self, key: str) -> Optional[str]:
        value = self._get_redis().get(self._key(key))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set_item(self, key: str, value: str) -> None:
        self._get_redis().set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self._get_redis().delete(self._key(key))

    def keys(self) -> List[str]:
        keys = []
        for raw in self._get_redis().scan_iter(f"{self._prefix}*"):
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            keys.append(raw[len(self._prefix):])
        return keys
