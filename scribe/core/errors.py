"""
Error taxonomy.

Every failure the core can produce maps to exactly one ``ErrorKind``.
Components raise ``AppError`` subclasses; only the response policy in
``scribe.api.errors`` decides how an error is rendered.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Closed set of failure classes."""

    VALIDATION = "validation"
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    INVALID_CREDENTIALS = "invalid_credentials"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    INTERNAL = "internal"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NO_TOKEN: 401,
    ErrorKind.INVALID_TOKEN: 401,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.DUPLICATE: 400,
    ErrorKind.METHOD_NOT_ALLOWED: 405,
    ErrorKind.INTERNAL: 500,
}


class ValidationViolation(BaseModel):
    """One failed rule on one request field."""

    field: str
    message: str
    value: Any = None


class AppError(Exception):
    """
    Base class for every error the core raises on purpose.

    ``operational`` errors describe anticipated conditions and are safe
    to show to the client verbatim.
    """

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Something went wrong!"

    def __init__(
        self,
        message: str | None = None,
        violations: list[ValidationViolation] | None = None,
    ):
        self.message = message or self.default_message
        self.violations = violations
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]

    @property
    def operational(self) -> bool:
        return self.kind is not ErrorKind.INTERNAL

    @property
    def status(self) -> str:
        """Envelope status: ``fail`` for client errors, ``error`` for faults."""
        return "fail" if 400 <= self.status_code < 500 else "error"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationFailedError(AppError):
    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"


class NoTokenError(AppError):
    kind = ErrorKind.NO_TOKEN
    default_message = "No token provided"


class InvalidTokenError(AppError):
    """Bad signature, malformed payload, expired, or subject deleted."""

    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid token"


class InvalidCredentialsError(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN
    default_message = "Not authorized"


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class DuplicateKeyError(AppError):
    kind = ErrorKind.DUPLICATE
    default_message = "Resource already exists"


class MethodNotAllowedError(AppError):
    kind = ErrorKind.METHOD_NOT_ALLOWED
    default_message = "Method not allowed"


class InternalError(AppError):
    """Wraps an unexpected fault. Its message never reaches the client."""

    kind = ErrorKind.INTERNAL

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)
