"""
Book operations on top of a BookStorage.

Write operations hold a single lock for the whole load-modify-save cycle so
concurrent requests in this process cannot lose each other's updates.
"""

import asyncio
from typing import Any, Dict, List, Optional

from api.storage import Book, BookStorage, StorageError
from utilities.logger import get_logger

logger = get_logger(__name__)


class BookNotFoundError(Exception):
    """Raised when no book has the requested id."""

    def __init__(self, book_id: int):
        self.book_id = book_id
        super().__init__(f"Book {book_id} not found")


def next_book_id(books: List[Book]) -> int:
    """Return one more than the largest integer id, or 1 for an empty collection."""
    ids = [
        book["id"] for book in books
        if isinstance(book.get("id"), int) and not isinstance(book.get("id"), bool)
    ]
    return max(ids, default=0) + 1


class BookService:
    """Service for book collection operations."""

    def __init__(self, storage: BookStorage, error_policy: str = "mask"):
        self.storage = storage
        self.error_policy = error_policy
        self._write_lock = asyncio.Lock()

    @property
    def masks_errors(self) -> bool:
        return self.error_policy == "mask"

    async def _load(self) -> Optional[List[Book]]:
        """
        Load the collection.

        Returns None when a storage failure was masked, so writers can skip
        saving over a collection they could not read.
        """
        try:
            return await asyncio.to_thread(self.storage.load)
        except StorageError as e:
            logger.error("Failed to load books", error=str(e), path=str(e.path) if e.path else None)
            if self.masks_errors:
                return None
            raise

    async def _save(self, books: List[Book]) -> None:
        try:
            await asyncio.to_thread(self.storage.save, books)
        except StorageError as e:
            logger.error("Failed to save books", error=str(e), path=str(e.path) if e.path else None)
            if not self.masks_errors:
                raise

    async def list_books(self) -> List[Book]:
        return await self._load() or []

    async def get_book(self, book_id: int) -> Book:
        for book in await self._load() or []:
            if book.get("id") == book_id:
                return book
        raise BookNotFoundError(book_id)

    async def create_book(self, payload: Dict[str, Any]) -> Book:
        """
        Append a new book with a server-assigned id.

        Args:
            payload: Client fields; any "id" it carries is overwritten

        Returns:
            The stored book including its id
        """
        async with self._write_lock:
            books = await self._load()
            if books is None:
                # Masked: answer as for an empty collection, leave the file alone
                logger.warning("Book not persisted, collection unreadable")
                return {**payload, "id": 1}

            book = {**payload, "id": next_book_id(books)}
            books.append(book)
            await self._save(books)

        logger.info("Book created", book_id=book["id"])
        return book

    async def update_book(self, book_id: int, payload: Dict[str, Any]) -> Book:
        """
        Shallow-merge payload fields into an existing book.

        Fields missing from the payload keep their stored values. The id
        always stays the one from the path.
        """
        async with self._write_lock:
            books = await self._load() or []
            for index, book in enumerate(books):
                if book.get("id") == book_id:
                    updated = {**book, **payload, "id": book["id"]}
                    books[index] = updated
                    await self._save(books)
                    break
            else:
                raise BookNotFoundError(book_id)

        logger.info("Book updated", book_id=book_id)
        return updated

    async def delete_book(self, book_id: int) -> None:
        async with self._write_lock:
            books = await self._load() or []
            remaining = [book for book in books if book.get("id") != book_id]
            if len(remaining) == len(books):
                raise BookNotFoundError(book_id)
            await self._save(remaining)

        logger.info("Book deleted", book_id=book_id)
