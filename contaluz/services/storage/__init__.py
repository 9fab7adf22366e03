"""
Storage Services Package

Provides the abstract interface and concrete implementations for the
persisted state blob. A local JSON file is the default backend; Google
Sheets is available for a cloud copy.
"""

from contaluz.services.storage.interface import (
    ConnectionError,
    StateCorruptedError,
    StateStorageInterface,
    StorageError,
)
from contaluz.services.storage.local import (
    InMemoryStateStorage,
    JsonFileStateStorage,
)
from contaluz.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsStateStorage,
)

__all__ = [
    # Interface
    "StateStorageInterface",
    # Exceptions
    "ConnectionError",
    "StateCorruptedError",
    "StorageError",
    # Local implementations
    "InMemoryStateStorage",
    "JsonFileStateStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsStateStorage",
]
