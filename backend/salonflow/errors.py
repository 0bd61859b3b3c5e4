# Overview: Shared domain exceptions and user-facing messages for write failures.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError


class NotFoundError(LookupError):
    """404-level: referenced record does not exist."""


class AuthorizationError(Exception):
    """403-level: actor's role or ownership does not allow the operation."""


def describe_error(exc: Exception) -> tuple[str, int]:
    """
    Translate a storage-layer failure into (message, http_status).

    Only database failures are translated. Domain errors carry their own
    message and are mapped by the routes.
    """
    if isinstance(exc, IntegrityError):
        return "This item already exists.", 409
    if isinstance(exc, StaleDataError):
        return "Operation was interrupted. Please try again.", 409
    if isinstance(exc, OperationalError):
        return "Service temporarily unavailable. Please try again.", 503
    return "An unexpected error occurred. Please try again.", 500
