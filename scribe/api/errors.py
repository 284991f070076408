"""
Response policy - the only place that decides what a client is told.

Any exception raised while handling a request ends up here. It is
classified into the closed taxonomy of ``scribe.core.errors``, logged
once, and rendered as the JSON error envelope:

    operational:      {"status": "fail", "message": ..., "errors": [...]}
    non-operational:  {"status": "error", "message": "Something went wrong!"}

Stack traces are added to non-operational responses only when the
deployment is configured with ``verbose_errors``; the server-side log
always gets them.
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scribe.core.errors import (
    AppError,
    DuplicateKeyError,
    InternalError,
    MethodNotAllowedError,
    NotFoundError,
    ValidationFailedError,
    ValidationViolation,
)
from scribe.core.validation import violations_from_pydantic
from scribe.integrations.sentry import capture_exception
from scribe.storage.base import UniqueViolationError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong!"


def _printable(value: Any) -> Any:
    """Escape characters that cannot be encoded as UTF-8, so echoed input always renders."""
    if isinstance(value, str):
        return value.encode("utf-8", "backslashreplace").decode("utf-8")
    if isinstance(value, list):
        return [_printable(item) for item in value]
    if isinstance(value, dict):
        return {_printable(k): _printable(v) for k, v in value.items()}
    return value


def _render_violation(violation: ValidationViolation) -> dict[str, Any]:
    # Redacted fields never set a value, so it is left out entirely.
    rendered = violation.model_dump(exclude_unset=True)
    if "value" in rendered:
        rendered["value"] = _printable(rendered["value"])
    return rendered


class ResponsePolicy:
    """Classifies failures and renders them, with a fixed verbosity."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def classify(self, exc: BaseException, path: str = "") -> AppError:
        """Map any exception onto exactly one taxonomy entry."""
        if isinstance(exc, AppError):
            return exc
        if isinstance(exc, UniqueViolationError):
            return DuplicateKeyError(f"A record with this {exc.field} already exists")
        if isinstance(exc, RequestValidationError):
            return ValidationFailedError(violations=violations_from_pydantic(exc.errors()))
        if isinstance(exc, StarletteHTTPException):
            if exc.status_code == 404:
                return NotFoundError(f"Can't find {path} on this server!")
            if exc.status_code == 405:
                return MethodNotAllowedError()
            if 400 <= exc.status_code < 500:
                return ValidationFailedError(str(exc.detail))
        return InternalError(exc)

    def render(self, error: AppError) -> dict[str, Any]:
        if error.operational:
            body: dict[str, Any] = {"status": error.status, "message": error.message}
            if error.violations:
                body["errors"] = [_render_violation(v) for v in error.violations]
            return body

        body = {"status": "error", "message": GENERIC_MESSAGE}
        if self.verbose:
            cause = getattr(error, "cause", error)
            body["error"] = type(cause).__name__
            body["detail"] = _printable(str(cause))
            body["stack"] = _printable(traceback.format_exception(type(cause), cause, cause.__traceback__))
        return body

    def respond(self, request: Request, exc: BaseException) -> JSONResponse:
        """Classify, log once, and build the response."""
        error = self.classify(exc, request.url.path)
        context = {
            "method": request.method,
            "path": request.url.path,
            "status_code": error.status_code,
        }

        if error.operational:
            logger.warning(
                "Operational error: %s",
                error.message,
                extra={**context, "error_kind": error.kind.value},
            )
        else:
            cause = getattr(error, "cause", exc)
            logger.error(
                "Programming error: %s",
                error.message,
                exc_info=(type(cause), cause, cause.__traceback__),
                extra=context,
            )
            capture_exception(cause, **context)

        return JSONResponse(status_code=error.status_code, content=self.render(error))


async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler registered on the app for every handled exception type."""
    policy: ResponsePolicy = request.app.state.response_policy
    return policy.respond(request, exc)


def register_exception_handlers(app) -> None:
    """Route framework-level and application errors through the policy."""
    app.add_exception_handler(AppError, handle_exception)
    app.add_exception_handler(UniqueViolationError, handle_exception)
    app.add_exception_handler(RequestValidationError, handle_exception)
    app.add_exception_handler(StarletteHTTPException, handle_exception)
