"""
Abstract Storage Interface

DESIGN DECISION: The whole tracker state is persisted as ONE blob under one
key. We define an abstract interface for it so that:
1. A local JSON file is the default, with no setup at all
2. Google Sheets can hold the blob for households that want a cloud copy
3. Tests use in-memory storage

The interface is intentionally tiny - load, save, clear. Schema handling
(defaults, backfills, merging) belongs to the tracker, not to storage.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StateStorageInterface(ABC):
    """
    Abstract interface for the persisted state blob.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load(self) -> Optional[dict]:
        """
        Read the stored blob.

        Returns:
            The decoded blob, or None if nothing has been saved yet

        Raises:
            StateCorruptedError: If something is stored but cannot be decoded
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, blob: dict) -> None:
        """
        Overwrite the stored blob.

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """
        Remove the stored blob. Clearing an empty store is not an error.

        Raises:
            StorageError: If the backend cannot be written
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StateCorruptedError(StorageError):
    """Stored blob exists but is not valid JSON (or not an object)."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
