"""
MongoDB access layer for the Book API.
Handles connection and CRUD operations on the books collection.
"""

from typing import Dict, List, Optional

import structlog
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure

from book_api.models import Book, BookPayload

logger = structlog.get_logger(__name__)


def _object_id(book_id: str) -> Optional[ObjectId]:
    """Convert a path id to an ObjectId, or None when it can't be one."""
    if not ObjectId.is_valid(book_id):
        return None
    return ObjectId(book_id)


class BookRepository:
    """Async repository over a Motor collection of books."""

    def __init__(self, collection: AsyncIOMotorCollection, database: Optional[AsyncIOMotorDatabase] = None):
        self.collection = collection
        self.database = database

    async def list_books(self) -> List[Book]:
        """Return every book in store order."""
        cursor = self.collection.find({})
        books_docs = await cursor.to_list(length=None)
        return [Book.from_document(book_doc) for book_doc in books_docs]

    async def insert_book(self, payload: BookPayload) -> Book:
        """Insert a new book and return it with its assigned id."""
        book_doc = payload.to_document()
        result = await self.collection.insert_one(book_doc)
        logger.debug("Inserted book", book_id=str(result.inserted_id), title=payload.title)
        return Book(id=str(result.inserted_id), **payload.to_document())

    async def update_book(self, book_id: str, payload: BookPayload) -> Optional[Book]:
        """
        Replace the business fields of a book.

        Returns:
            The updated Book, or None if no book has that id
        """
        object_id = _object_id(book_id)
        if object_id is None:
            return None

        book_doc = await self.collection.find_one_and_update(
            {"_id": object_id},
            {"$set": payload.to_document()},
            return_document=ReturnDocument.AFTER,
        )
        return Book.from_document(book_doc) if book_doc else None

    async def delete_book(self, book_id: str) -> Optional[Book]:
        """
        Remove a book.

        Returns:
            The deleted Book's last-known data, or None if no book has that id
        """
        object_id = _object_id(book_id)
        if object_id is None:
            return None

        book_doc = await self.collection.find_one_and_delete({"_id": object_id})
        return Book.from_document(book_doc) if book_doc else None

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            if self.database is not None:
                await self.database.command("ping")
            books_count = await self.collection.count_documents({})
            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count,
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }


class MongoDBManager:
    """
    Owns the Motor client for the lifetime of the application.
    """

    def __init__(self, connection_url: str, database_name: str, collection_name: str):
        """
        Initialize MongoDB manager.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            collection_name: Name of the books collection
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection: Optional[AsyncIOMotorCollection] = None

    async def connect(self) -> BookRepository:
        """Establish connection to MongoDB and return a repository over it."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url)
            self.database = self.client[self.database_name]
            self.collection = self.database[self.collection_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info("Connected to MongoDB database",
                        database=self.database_name,
                        collection=self.collection_name)

        except ConnectionFailure as e:
            logger.error("MongoDB connection error", error=str(e))
            raise

        return BookRepository(self.collection, self.database)

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")
