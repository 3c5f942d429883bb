"""
Domain errors shared by the pricing, availability, booking and admin modules.

Pure modules raise these; the routers translate them into HTTPException
responses with `to_http_exception`.
"""

from typing import Iterable, List, Optional

from fastapi import HTTPException


class BookingError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    """A required field is missing or a value is outside its allowed set."""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields: List[str] = list(fields or [])


class NotFoundError(BookingError):
    status_code = 404

    def __init__(self, message: str, redirect_to: Optional[str] = None):
        super().__init__(message)
        self.redirect_to = redirect_to


class UpstreamError(BookingError):
    """The reservation store or auth collaborator failed; message is kept verbatim."""

    status_code = 502


class AuthError(BookingError):
    status_code = 401


class TransitionError(BookingError):
    """A booking step or reservation status change that is not allowed."""

    status_code = 409


def to_http_exception(error: BookingError) -> HTTPException:
    detail = {"message": error.message, "error": type(error).__name__}
    if isinstance(error, ValidationError) and error.fields:
        detail["fields"] = error.fields
    if isinstance(error, NotFoundError) and error.redirect_to:
        detail["redirect_to"] = error.redirect_to
    return HTTPException(status_code=error.status_code, detail=detail)
