"""Durable cart storage backends"""

import os
import re
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class CartStorageError(Exception):
    """Storage backend could not read or write a cart"""
    pass


class CartStorage(ABC):
    """Key/value store holding one serialized cart per browsing session"""

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """Return the stored payload, or None when nothing is stored"""

    @abstractmethod
    def save(self, key: str, data: str) -> None:
        """Store the payload under key"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the payload; missing keys are ignored"""


class MemoryCartStorage(CartStorage):
    """In-memory cart storage"""

    def __init__(self):
        self.entries: dict[str, str] = {}

    def load(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def save(self, key: str, data: str) -> None:
        self.entries[key] = data

    def delete(self, key: str) -> None:
        self.entries.pop(key, None)


class FileCartStorage(CartStorage):
    """One JSON file per key under a directory"""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = _UNSAFE_KEY_CHARS.sub("_", key)
        if not safe_key:
            raise CartStorageError("Empty cart storage key")
        return self.directory / f"cart-{safe_key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CartStorageError(f"Failed to read {path}: {e}") from e

    def save(self, key: str, data: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=".cart-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise CartStorageError(f"Failed to write {path}: {e}") from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise CartStorageError(f"Failed to delete {path}: {e}") from e


def create_cart_storage(backend: str, directory: str) -> CartStorage:
    """Build the configured storage backend"""
    if backend == "memory":
        return MemoryCartStorage()
    if backend == "file":
        logger.info(f"Cart storage directory: {directory}")
        return FileCartStorage(directory)
    raise ValueError(f"Unknown cart storage backend: {backend}")
