"""
Storage layer for the book collection.

The whole collection lives in a single JSON array. Every operation reads the
complete array and writes it back in full; there is no partial persistence.
"""

import copy
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from utilities.logger import get_logger

logger = get_logger(__name__)

Book = Dict[str, Any]


class StorageError(Exception):
    """Raised when the collection cannot be read from or written to storage."""

    def __init__(self, operation: str, reason: str, path: Optional[Path] = None):
        self.operation = operation
        self.reason = reason
        self.path = path
        location = f" ({path})" if path else ""
        super().__init__(f"Failed to {operation} book collection{location}: {reason}")


class BookStorage(ABC):
    """Loads and saves the complete book collection."""

    @abstractmethod
    def load(self) -> List[Book]:
        """Return the full collection, raising StorageError on failure."""

    @abstractmethod
    def save(self, books: List[Book]) -> None:
        """Replace the full collection, raising StorageError on failure."""


class JSONFileStorage(BookStorage):
    """Collection persisted as one pretty-printed JSON array on disk."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> List[Book]:
        if not self.path.exists():
            logger.debug("Data file missing, starting with empty collection", path=str(self.path))
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError("load", f"invalid JSON: {e}", self.path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError("load", str(e), self.path) from e

        if not isinstance(data, list):
            raise StorageError("load", f"expected a JSON array, got {type(data).__name__}", self.path)
        if not all(isinstance(book, dict) for book in data):
            raise StorageError("load", "expected an array of objects", self.path)
        return data

    def save(self, books: List[Book]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(books, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError("save", str(e), self.path) from e


class InMemoryStorage(BookStorage):
    """List-backed storage; callers never share objects with the store."""

    def __init__(self, books: Optional[List[Book]] = None):
        self._books: List[Book] = copy.deepcopy(books) if books else []

    def load(self) -> List[Book]:
        return copy.deepcopy(self._books)

    def save(self, books: List[Book]) -> None:
        self._books = copy.deepcopy(books)
