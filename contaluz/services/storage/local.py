"""
Local State Storage

JSON file storage (the default backend) and an in-memory store for tests.

The file holds an object keyed by the state key, so the same file could
hold more than one household if that is ever needed:

    {"contaluz_data": {"balance": 120.5, "appliances": [...], ...}}
"""

import json
import os
from pathlib import Path
from typing import Optional

from contaluz.config import get_settings
from contaluz.services.storage.interface import (
    StateCorruptedError,
    StateStorageInterface,
    StorageError,
)


def decode_blob(raw: str) -> dict:
    """Parse a stored blob, rejecting anything that is not a JSON object."""
    try:
        blob = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StateCorruptedError(f"Stored state is not valid JSON: {e}")

    if not isinstance(blob, dict):
        raise StateCorruptedError(
            f"Stored state must be an object, got {type(blob).__name__}"
        )
    return blob


class JsonFileStateStorage(StateStorageInterface):
    """State blob in a local JSON file, written atomically."""

    def __init__(self, path: Optional[str] = None, key: Optional[str] = None):
        settings = get_settings().storage if path is None or key is None else None
        self._path = Path(path if path is not None else settings.state_path)
        self._key = key if key is not None else settings.state_key

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")
        if not raw.strip():
            return {}
        return decode_blob(raw)

    def _write_file(self, content: dict) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(content, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    def load(self) -> Optional[dict]:
        blob = self._read_file().get(self._key)
        if blob is None:
            return None
        if not isinstance(blob, dict):
            raise StateCorruptedError(
                f"State under '{self._key}' must be an object, got {type(blob).__name__}"
            )
        return blob

    def save(self, blob: dict) -> None:
        try:
            content = self._read_file()
        except StateCorruptedError:
            # Unreadable file is replaced wholesale
            content = {}
        content[self._key] = blob
        self._write_file(content)

    def clear(self) -> None:
        try:
            content = self._read_file()
        except StateCorruptedError:
            content = {}
        if self._key in content or self._path.exists():
            content.pop(self._key, None)
            self._write_file(content)


class InMemoryStateStorage(StateStorageInterface):
    """
    Blob kept as a JSON string in memory.

    Serializing on save keeps the same round-trip semantics as the file
    backend: callers never share mutable structures with the store.
    """

    def __init__(self, raw: Optional[str] = None):
        self._raw = raw

    @property
    def raw(self) -> Optional[str]:
        return self._raw

    def load(self) -> Optional[dict]:
        if self._raw is None:
            return None
        return decode_blob(self._raw)

    def save(self, blob: dict) -> None:
        try:
            self._raw = json.dumps(blob, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"State is not JSON serializable: {e}")

    def clear(self) -> None:
        self._raw = None
