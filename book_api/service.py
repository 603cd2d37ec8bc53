"""
Book operations shared by the route handlers.
"""

import asyncio
from typing import List

import structlog

from book_api.database import BookRepository
from book_api.errors import BookNotFoundError, CompoundOperationError, StoreError
from book_api.models import Book, BookPayload

logger = structlog.get_logger(__name__)


class BookService:
    """
    Business operations on books.

    Store failures are re-raised as StoreError carrying the client-facing
    message; a missing id is raised as BookNotFoundError.
    """

    def __init__(self, repository: BookRepository, compensate_compound: bool = False):
        self.repository = repository
        self.compensate_compound = compensate_compound

    async def list_books(self) -> List[Book]:
        try:
            return await self.repository.list_books()
        except Exception as e:
            logger.error("Failed to get books", error=str(e))
            raise StoreError("Error retrieving books.", detail=str(e)) from e

    async def create_book(self, payload: BookPayload) -> Book:
        try:
            book = await self.repository.insert_book(payload)
        except Exception as e:
            logger.error("Failed to create book", title=payload.title, error=str(e))
            raise StoreError("Error adding a new book.", detail=str(e)) from e

        logger.info("Book created", book_id=book.id)
        return book

    async def update_book(self, book_id: str, payload: BookPayload) -> Book:
        try:
            book = await self.repository.update_book(book_id, payload)
        except Exception as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise StoreError("Error updating the book.", detail=str(e)) from e

        if book is None:
            raise BookNotFoundError()
        logger.info("Book updated", book_id=book_id)
        return book

    async def delete_book(self, book_id: str) -> Book:
        try:
            book = await self.repository.delete_book(book_id)
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise StoreError("Error deleting the book.", detail=str(e)) from e

        if book is None:
            raise BookNotFoundError()
        logger.info("Book deleted", book_id=book_id)
        return book

    async def add_then_delete(self, payload: BookPayload, book_id: str) -> None:
        """
        Create a book and delete ``book_id`` concurrently.

        Both operations always run to completion. If either fails the whole
        request fails with CompoundOperationError; the succeeded half is kept
        unless compensation is enabled.
        """
        created, deleted = await asyncio.gather(
            self.create_book(payload),
            self.delete_book(book_id),
            return_exceptions=True,
        )

        # A cancelled half comes back as CancelledError, a BaseException
        failure = next((r for r in (created, deleted) if isinstance(r, BaseException)), None)
        if failure is None:
            return

        logger.error("Add then delete failed",
                     book_id=book_id,
                     create_failed=isinstance(created, BaseException),
                     delete_failed=isinstance(deleted, BaseException),
                     error=repr(failure))

        if self.compensate_compound and isinstance(created, Book):
            await self._compensate(created)

        raise CompoundOperationError(detail=_describe(failure)) from failure

    async def _compensate(self, created: Book) -> None:
        """Remove the book created by a failed add-then-delete."""
        try:
            await self.repository.delete_book(created.id)
            logger.info("Rolled back created book", book_id=created.id)
        except Exception as e:
            logger.error("Failed to roll back created book", book_id=created.id, error=str(e))


def _describe(error: BaseException) -> str:
    if isinstance(error, BookNotFoundError):
        return f"Error deleting book: {error.msg}"
    return getattr(error, "detail", None) or str(error) or repr(error)
