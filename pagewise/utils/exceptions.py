from __future__ import annotations

from typing import Any


class PagewiseError(Exception):
    """Base exception for all Pagewise errors."""


class ValidationError(PagewiseError):
    """Raised when a request parameter is malformed or out of range.

    The offending value is kept so the boundary can log it.
    """

    def __init__(self, message: str, value: Any = None) -> None:
        super().__init__(message)
        self.value = value


class InvalidToken(ValidationError):
    """Raised when a continuation token cannot be decoded."""


class PaginationConflict(PagewiseError):
    """Raised when a continuation token no longer resolves against the collection.

    The client must drop the token and restart from the first page.
    """


class NotFound(PagewiseError):
    """Raised when the addressed AU, job, poll or peer does not exist."""


class Forbidden(PagewiseError):
    """Raised when the caller lacks the role required for an operation."""


class LinkError(PagewiseError):
    """Raised when a navigation link cannot be built from the base URI."""
