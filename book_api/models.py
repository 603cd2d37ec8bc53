"""
API models and schemas for the Book API.
"""

from datetime import datetime
from typing import Any, Dict, List, Union

from pydantic import BaseModel, Field


REQUIRED_FIELDS = ("title", "author", "genre")

# Scalars are stored as their string form, like a String schema field would cast them
FieldValue = Union[str, int, float, bool, None]


def as_text(value: Any) -> str:
    """String form of a scalar field value: true, 1984, 2.5."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class BookPayload(BaseModel):
    """Request body for creating or updating a book."""
    title: FieldValue = Field(None, description="Book title")
    author: FieldValue = Field(None, description="Book author")
    genre: FieldValue = Field(None, description="Book genre")

    model_config = {"extra": "ignore"}

    def missing_fields(self) -> List[str]:
        """Return the required fields that are absent or empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def to_document(self) -> Dict[str, str]:
        """Business fields as stored in MongoDB."""
        return {name: as_text(getattr(self, name)) for name in REQUIRED_FIELDS}


class Book(BaseModel):
    """Book as returned by the API."""
    id: str = Field(..., description="Store-assigned book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    genre: str = Field(..., description="Book genre")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a Book from a raw MongoDB document."""
        book_doc = dict(document)
        book_doc["id"] = str(book_doc.pop("_id"))
        return cls(**book_doc)


class ResultEnvelope(BaseModel):
    """Uniform wrapper used by every /book response."""
    status: int = Field(..., description="HTTP status code of the response")
    msg: str = Field(..., description="Human-readable result message")
    book: Union[Book, List[Book], Dict[str, Any], None] = Field(None, description="Result payload")


class ErrorResponse(BaseModel):
    """Error response model."""
    status: int = Field(..., description="HTTP status code")
    msg: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
