"""
Adapters - Implementations of ports.

Durable Storage:
- FileStorageAdapter: JSON file on local disk (default)
- RedisStorageAdapter: Redis strings
- MemoryStorageAdapter: In-memory dict (testing)

Remote Authority:
- HTTPAuthAdapter: JSON over HTTP through the RequestGateway
"""

from session_auth.adapters.memory_storage import MemoryStorageAdapter
from session_auth.adapters.file_storage import FileStorageAdapter
from session_auth.adapters.redis_storage import RedisStorageAdapter
from session_auth.adapters.http_auth import HTTPAuthAdapter
from session_auth.ports.storage_port import StoragePort


def create_storage(settings) -> StoragePort:
    """
    Build the storage backend named by settings.storage_backend.

    Args:
        settings: session_auth.config.Settings

    Returns:
        Storage adapter
    """
    backend = settings.storage_backend
    if backend == "memory":
        return MemoryStorageAdapter()
    if backend == "file":
        return FileStorageAdapter(settings.storage_path)
    if backend == "redis":
        return RedisStorageAdapter(redis_url=settings.redis_url, prefix=settings.redis_prefix)
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "MemoryStorageAdapter",
    "FileStorageAdapter",
    "RedisStorageAdapter",
    "HTTPAuthAdapter",
    "create_storage",
]
