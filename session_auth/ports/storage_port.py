"""
Storage Port - Interface for durable key/value storage behind the credential store.

Implementations:
- FileStorageAdapter: JSON file on local disk
- RedisStorageAdapter: Redis strings
- MemoryStorageAdapter: In-memory dict (testing only)
"""

from abc import ABC, abstractmethod
from typing import List, Optional


class StoragePort(ABC):
    """Port: Persist string values that survive a process restart."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Args:
            key: Storage key
            value: String value
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Delete a value. Removing a missing key is not an error.

        Args:
            key: Storage key
        """
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """
        List stored keys.

        Returns:
            Keys currently present
        """
        pass
