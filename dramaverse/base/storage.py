# ==============================================================================
# Key-Value Store Abstract Base Class
# ==============================================================================
"""
Abstract interface for the device-local key-value storage.

The analytics pipeline owns its keys exclusively; nothing else reads or
writes them. Implementations: local JSON files, Valkey/Redis.
"""

from abc import ABC, abstractmethod
from typing import Any


class KeyValueStore(ABC):
    """
    Generic key-value storage interface.

    All values are JSON-serializable (lists, dicts, strings, numbers).
    Implementations handle serialization/deserialization internally and
    raise StorageError for data they cannot decode or write.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """
        Get a stored value.

        Args:
            key: Storage key

        Returns:
            Decoded value, or None if the key does not exist

        Raises:
            StorageError: If the stored data cannot be decoded
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store a value, replacing any previous one.

        A successful return means the value is durable.

        Args:
            key: Storage key
            value: JSON-serializable value

        Raises:
            StorageError: If the value cannot be serialized or written
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Storage key to delete

        Returns:
            True if key was deleted, False if not found
        """
        ...

    def close(self) -> None:
        """Release any underlying resources. Optional override."""
        pass
