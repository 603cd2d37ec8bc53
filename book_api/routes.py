"""
Route handlers for the Book API.
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from book_api.errors import BookNotFoundError, BookValidationError
from book_api.middleware import envelope_response
from book_api.models import BookPayload
from book_api.service import BookService

logger = structlog.get_logger(__name__)

router = APIRouter()


def get_book_service(request: Request) -> BookService:
    """Resolve the BookService built at startup."""
    return request.app.state.book_service


def _validation_failure(payload: BookPayload):
    missing = payload.missing_fields()
    if not missing:
        return None
    logger.info("Rejected book payload", missing=missing)
    return envelope_response(BookValidationError.status, BookValidationError.msg, None)


@router.get("/", response_class=PlainTextResponse, tags=["Pages"])
async def home():
    return "Home Root Route"


@router.get("/about", response_class=PlainTextResponse, tags=["Pages"])
@router.get("/about/", response_class=PlainTextResponse, tags=["Pages"], include_in_schema=False)
async def about():
    return "About Us"


@router.get("/contact", response_class=PlainTextResponse, tags=["Pages"])
@router.get("/contact/", response_class=PlainTextResponse, tags=["Pages"], include_in_schema=False)
async def contact():
    return "Contact Us"


@router.get("/book", tags=["Books"])
@router.get("/book/", tags=["Books"], include_in_schema=False)
async def list_books(service: BookService = Depends(get_book_service)):
    """Get every book."""
    books = await service.list_books()
    return envelope_response(status.HTTP_200_OK, "books get Successfully", books)


@router.post("/book", tags=["Books"])
@router.post("/book/", tags=["Books"], include_in_schema=False)
async def create_book(
    payload: Optional[BookPayload] = None,
    service: BookService = Depends(get_book_service)
):
    """
    Create a book.

    - **title**, **author**, **genre**: all required
    """
    payload = payload or BookPayload()
    rejected = _validation_failure(payload)
    if rejected is not None:
        return rejected

    book = await service.create_book(payload)
    return envelope_response(status.HTTP_201_CREATED, "Book created successfully.", book)


@router.post("/book/edit/{book_id}", tags=["Books"])
@router.post("/book/edit/{book_id}/", tags=["Books"], include_in_schema=False)
async def update_book(
    book_id: str,
    payload: Optional[BookPayload] = None,
    service: BookService = Depends(get_book_service)
):
    """
    Replace the title, author and genre of a book.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    payload = payload or BookPayload()
    rejected = _validation_failure(payload)
    if rejected is not None:
        return rejected

    try:
        book = await service.update_book(book_id, payload)
    except BookNotFoundError as e:
        return envelope_response(e.status, e.msg, None)

    return envelope_response(status.HTTP_200_OK, "Book updated successfully.", book)


@router.post("/book/delete/{book_id}", tags=["Books"])
@router.post("/book/delete/{book_id}/", tags=["Books"], include_in_schema=False)
async def delete_book(book_id: str, service: BookService = Depends(get_book_service)):
    """
    Delete a book and return its last-known data.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    try:
        book = await service.delete_book(book_id)
    except BookNotFoundError as e:
        return envelope_response(e.status, e.msg, None)

    return envelope_response(status.HTTP_200_OK, "Book deleted successfully.", book)


@router.post("/book/add/then/delete/{book_id}", tags=["Books"])
@router.post("/book/add/then/delete/{book_id}/", tags=["Books"], include_in_schema=False)
async def add_then_delete_book(
    book_id: str,
    payload: Optional[BookPayload] = None,
    service: BookService = Depends(get_book_service)
):
    """
    Create a new book and delete ``book_id`` concurrently.

    Fails as a unit if either half fails.
    """
    payload = payload or BookPayload()
    rejected = _validation_failure(payload)
    if rejected is not None:
        return rejected

    await service.add_then_delete(payload, book_id)
    return envelope_response(status.HTTP_200_OK, "Book add then delete successfully.", {})
