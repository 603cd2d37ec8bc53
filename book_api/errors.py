"""
Error taxonomy for the Book API.

Every error carries the HTTP ``status`` and the client-facing ``msg`` the
central error responder renders. ``detail`` holds the internal description,
only exposed when the service runs in debug mode.
"""

from typing import Optional


class BookAPIError(Exception):
    """Base class for errors rendered by the central error responder."""

    status = 500
    msg = "Internal Server Error"

    def __init__(
        self,
        msg: Optional[str] = None,
        status: Optional[int] = None,
        detail: Optional[str] = None,
        envelope: bool = True,
    ):
        if msg is not None:
            self.msg = msg
        if status is not None:
            self.status = status
        self.detail = detail
        # Errors raised by /book routes answer with the {status, msg, book} envelope
        self.envelope = envelope
        super().__init__(self.msg)


class BookValidationError(BookAPIError):
    """A required book field is missing."""

    status = 400
    msg = "Title, author, and genre are required."


class BookNotFoundError(BookAPIError):
    """No book matches the requested id."""

    status = 404
    msg = "Book not found."


class StoreError(BookAPIError):
    """The underlying document store failed."""

    status = 500


class CompoundOperationError(BookAPIError):
    """One half of the add-then-delete request failed."""

    status = 500
    msg = "Error create and delete process."


class RouteNotFoundError(BookAPIError):
    """No route matches the request."""

    status = 404
    msg = "Endpoint not found"

    def __init__(self, msg: Optional[str] = None):
        super().__init__(msg, envelope=False)
