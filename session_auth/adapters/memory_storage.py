"""
Memory Storage Adapter - In-memory key/value storage (testing only).
"""

from typing import Dict, List, Optional
from session_auth.ports.storage_port import StoragePort


class MemoryStorageAdapter(StoragePort):
    """
    In-memory storage.

    WARNING: Only for testing. Values are lost on restart,
    so nothing here is actually durable.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        """Initialize in-memory storage."""
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)
