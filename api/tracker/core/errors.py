"""HTTP-aware error kinds raised by the view services."""

from __future__ import annotations

from fastapi import HTTPException, status


class InvalidPage(HTTPException):
    """Raised for page numbers below one or past the end of the result set."""

    def __init__(self, detail: str = "Invalid page number") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    """Raised when a target id does not resolve to anything visible to the user."""

    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Forbidden(HTTPException):
    """Raised when a list exists but is private to another user."""

    def __init__(self, detail: str = "List is private") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
