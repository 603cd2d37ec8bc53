"""
Pytest configuration and shared fixtures.
"""

import re
from typing import Dict, List, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from book_api.config import APIConfig
from book_api.error_log import ErrorLogSink
from book_api.main import create_app
from book_api.models import Book, BookPayload


class FakeBookRepository:
    """In-memory stand-in for BookRepository."""

    def __init__(self):
        self.books: Dict[str, Book] = {}
        self.failing: set = set()

    def fail_on(self, *operations: str) -> None:
        """Make the named operations raise like a broken store."""
        self.failing.update(operations)

    def _check(self, operation: str) -> None:
        if operation in self.failing:
            raise ConnectionError(f"store unavailable during {operation}")

    async def list_books(self) -> List[Book]:
        self._check("list_books")
        return list(self.books.values())

    async def insert_book(self, payload: BookPayload) -> Book:
        self._check("insert_book")
        book = Book(id=str(ObjectId()), **payload.to_document())
        self.books[book.id] = book
        return book

    async def update_book(self, book_id: str, payload: BookPayload) -> Optional[Book]:
        self._check("update_book")
        if book_id not in self.books:
            return None
        book = Book(id=book_id, **payload.to_document())
        self.books[book_id] = book
        return book

    async def delete_book(self, book_id: str) -> Optional[Book]:
        self._check("delete_book")
        return self.books.pop(book_id, None)

    async def health_check(self) -> Dict:
        return {"status": "healthy", "books_count": len(self.books)}


@pytest.fixture
def fake_repository():
    """Empty in-memory book store."""
    return FakeBookRepository()


@pytest.fixture
def error_log_path(tmp_path):
    return tmp_path / "error.log"


@pytest.fixture
def settings(error_log_path):
    return APIConfig(error_log_file=str(error_log_path), debug=False, _env_file=None)


@pytest.fixture
def app(settings, fake_repository, error_log_path):
    return create_app(settings, repository=fake_repository, error_log=ErrorLogSink(error_log_path))


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sample_book_data():
    return {"title": "Dune", "author": "Herbert", "genre": "SciFi"}


ENTRY_START = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z - ", re.MULTILINE)


@pytest.fixture
def error_log_entries(error_log_path):
    """Callable returning the entries written to the error log so far."""
    def read() -> List[str]:
        if not error_log_path.exists():
            return []
        text = error_log_path.read_text(encoding="utf-8")
        starts = [m.start() for m in ENTRY_START.finditer(text)] + [len(text)]
        return [text[a:b] for a, b in zip(starts, starts[1:])]
    return read
