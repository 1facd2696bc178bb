"""
CaseDesk Legal - Error Taxonomy

Store and auth errors are raised as AppError subclasses and rendered by a
single exception handler in src.main, so a route never sends two responses.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base application error with an HTTP status and optional details."""

    status_code = 500
    code = "APP_ERROR"

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for API responses."""
        result: Dict[str, Any] = {
            "message": self.message,
            "error": self.code,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


class ValidationError(AppError):
    """Missing or malformed required field."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        errors: Optional[Dict[str, str]] = None,
        details: Any = None,
    ):
        self.errors = errors or {}
        if details is None and self.errors:
            details = ", ".join(f"{field}: {msg}" for field, msg in self.errors.items())
        super().__init__(message, details)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.errors:
            result["errors"] = self.errors
        return result


class AuthError(AppError):
    """Missing token or wrong credentials."""

    status_code = 401
    code = "AUTH_ERROR"


class ForbiddenError(AppError):
    """Invalid or expired token, or acting on another account."""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class DuplicateKeyError(AppError):
    """Unique constraint violation (account email)."""

    status_code = 409
    code = "DUPLICATE_KEY"


class DatabaseConnectionError(AppError, ConnectionError):
    """The database stayed unreachable after the retry budget was spent."""

    status_code = 503
    code = "CONNECTION_ERROR"


class UnclassifiedError(AppError):
    status_code = 500
    code = "UNCLASSIFIED_ERROR"


@contextmanager
def unclassified(message: str):
    """
    Turn unexpected persistence failures into an UnclassifiedError.

    AppError subclasses pass through unchanged so their status survives.
    """
    try:
        yield
    except AppError:
        raise
    except SQLAlchemyError as exc:
        logger.exception(message)
        raise UnclassifiedError(message, details=str(exc)) from exc
