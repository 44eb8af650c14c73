"""
Domain error taxonomy.

Every error is an HTTPException so the request layer maps it to a status code
without a translation table, and services can be tested the same way whether
they are called directly or over HTTP.
"""

from typing import Any

from fastapi import HTTPException
from starlette import status


class DomainError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, **context: Any):
        super().__init__(status_code=self.status_code, detail=detail)
        self.context = context


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class InvariantViolation(DomainError):
    """
    A consistency rule would be broken (negative stock, counter on a missing row).

    The detail is internal; callers only ever see PUBLIC_MESSAGE.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    PUBLIC_MESSAGE = "Internal server error"
