"""Storage layer for dictation-cleanup.

Provides atomic file operations and a JSON-file-backed key-value store
used as the persistent settings store for user-trained data.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from dictation_cleanup.errors import PersistenceError
from dictation_cleanup.logging import get_logger

logger = get_logger(__name__)

SETTINGS_FILENAME = "settings.json"


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write data to a file atomically.

    Writes to a temporary file in the same directory, then renames to target.
    This prevents data corruption from interrupted writes.

    Args:
        path: Target file path
        data: String data to write
        encoding: File encoding (default utf-8)

    Raises:
        PersistenceError: If the write operation fails
    """
    fd = None
    temp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory keeps the rename on one filesystem
        fd, temp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=path.stem + "_",
            dir=path.parent,
        )
        os.write(fd, data.encode(encoding))
        os.fsync(fd)
        os.close(fd)
        fd = None

        os.replace(temp_path, path)
        temp_path = None

    except OSError as e:
        raise PersistenceError(f"Failed to write {path}: {e}", context={"path": str(path)}) from e
    finally:
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass
        if temp_path is not None:
            try:
                os.unlink(temp_path)
            except OSError:
                pass


def atomic_write_json(path: Path, data: dict | list, indent: int = 2) -> None:
    """Write JSON data to a file atomically.

    Args:
        path: Target file path
        data: Data to serialize as JSON
        indent: JSON indentation level (default 2)
    """
    try:
        json_str = json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise PersistenceError(f"Cannot serialize data for {path}: {e}") from e
    atomic_write(path, json_str)


def read_json(path: Path) -> Any:
    """Read JSON data from a file.

    Args:
        path: File path to read

    Returns:
        Parsed JSON data

    Raises:
        FileNotFoundError: If file doesn't exist
        PersistenceError: If file is unreadable or invalid JSON
    """
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Invalid JSON in {path}: {e}", context={"path": str(path)}) from e
    except (OSError, UnicodeDecodeError) as e:
        raise PersistenceError(f"Failed to read {path}: {e}", context={"path": str(path)}) from e


class SettingsStore:
    """Simple key-value settings store backed by one JSON file.

    Every ``set``/``delete`` rewrites the whole file atomically. Reads go
    to disk each time so that separate store instances pointed at the same
    file observe each other's writes.

    Example:
        store = SettingsStore(Path("~/.dictation-cleanup/settings.json"))
        store.set("training_samples", [{"incorrect": "clawed", "correct": "Claude"}])
        store.get("training_samples")
    """

    def __init__(self, path: Path | str):
        """Initialize the store.

        Args:
            path: Path to the JSON file holding all keys
        """
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        try:
            data = read_json(self.path)
        except FileNotFoundError:
            return {}

        if not isinstance(data, dict):
            raise PersistenceError(
                f"Settings file {self.path} does not contain an object",
                context={"path": str(self.path), "type": type(data).__name__},
            )
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Get the value stored under a key.

        Args:
            key: Key to look up
            default: Value returned when the key is absent

        Raises:
            PersistenceError: If the settings file is unreadable or corrupt
        """
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under a key.

        A settings file that cannot be parsed is replaced.

        Raises:
            PersistenceError: If the value cannot be written
        """
        try:
            data = self._read_all()
        except PersistenceError as e:
            # Unreadable file: rewrite it rather than block all future saves
            logger.warning(f"Replacing corrupt settings file: {e}")
            data = {}
        data[key] = value
        atomic_write_json(self.path, data)
        logger.debug(f"Stored key {key!r}", extra={"path": str(self.path)})

    def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if the key existed
        """
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        atomic_write_json(self.path, data)
        return True

    def keys(self) -> list[str]:
        """List all stored keys."""
        return sorted(self._read_all().keys())

    def __contains__(self, key: str) -> bool:
        return key in self._read_all()
