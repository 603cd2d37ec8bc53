"""
Unit tests for the MongoDB book repository.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from pymongo import ReturnDocument

from book_api.database import BookRepository
from book_api.models import BookPayload


class TestBookRepository:
    """Test cases for BookRepository class."""

    @pytest.fixture
    def collection(self):
        """Create a mock Motor collection."""
        collection = MagicMock()
        collection.insert_one = AsyncMock()
        collection.find_one_and_update = AsyncMock()
        collection.find_one_and_delete = AsyncMock()
        collection.count_documents = AsyncMock(return_value=3)
        return collection

    @pytest.fixture
    def repository(self, collection):
        return BookRepository(collection)

    @pytest.fixture
    def payload(self):
        return BookPayload(title="Dune", author="Herbert", genre="SciFi")

    @pytest.mark.asyncio
    async def test_list_books(self, repository, collection):
        object_id = ObjectId()
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=[
            {"_id": object_id, "title": "Dune", "author": "Herbert", "genre": "SciFi"}
        ])
        collection.find.return_value = cursor

        books = await repository.list_books()

        collection.find.assert_called_once_with({})
        assert len(books) == 1
        assert books[0].id == str(object_id)
        assert books[0].title == "Dune"

    @pytest.mark.asyncio
    async def test_insert_book(self, repository, collection, payload):
        object_id = ObjectId()
        collection.insert_one.return_value = MagicMock(inserted_id=object_id)

        book = await repository.insert_book(payload)

        collection.insert_one.assert_awaited_once_with(
            {"title": "Dune", "author": "Herbert", "genre": "SciFi"}
        )
        assert book.id == str(object_id)
        assert book.genre == "SciFi"

    @pytest.mark.asyncio
    async def test_update_book(self, repository, collection, payload):
        object_id = ObjectId()
        collection.find_one_and_update.return_value = {
            "_id": object_id, "title": "Dune", "author": "Herbert", "genre": "SciFi"
        }

        book = await repository.update_book(str(object_id), payload)

        collection.find_one_and_update.assert_awaited_once_with(
            {"_id": object_id},
            {"$set": {"title": "Dune", "author": "Herbert", "genre": "SciFi"}},
            return_document=ReturnDocument.AFTER,
        )
        assert book.id == str(object_id)

    @pytest.mark.asyncio
    async def test_update_book_not_found(self, repository, collection, payload):
        collection.find_one_and_update.return_value = None
        assert await repository.update_book(str(ObjectId()), payload) is None

    @pytest.mark.asyncio
    async def test_invalid_id_is_not_found(self, repository, collection, payload):
        """Test that malformed ids never reach the store."""
        assert await repository.update_book("not-an-object-id", payload) is None
        assert await repository.delete_book("12345") is None
        collection.find_one_and_update.assert_not_awaited()
        collection.find_one_and_delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_book(self, repository, collection):
        object_id = ObjectId()
        collection.find_one_and_delete.return_value = {
            "_id": object_id, "title": "Dune", "author": "Herbert", "genre": "SciFi"
        }

        book = await repository.delete_book(str(object_id))

        collection.find_one_and_delete.assert_awaited_once_with({"_id": object_id})
        assert book.title == "Dune"

    @pytest.mark.asyncio
    async def test_health_check(self, repository):
        health = await repository.health_check()
        assert health["status"] == "healthy"
        assert health["books_count"] == 3

    @pytest.mark.asyncio
    async def test_health_check_failure(self, repository, collection):
        collection.count_documents.side_effect = Exception("Connection refused")
        health = await repository.health_check()
        assert health["status"] == "unhealthy"
        assert "Connection refused" in health["error"]
