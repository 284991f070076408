"""
ASGI middleware wrapping every route.

Order, outermost first:
    RequestLoggingMiddleware  - request/response log lines with a request id
    ErrorBoundaryMiddleware   - last resort for exceptions no handler caught

Application errors are normally rendered by the exception handlers in
``scribe.api.errors``; the boundary only sees what escapes them.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING, Any

from starlette.datastructures import MutableHeaders
from starlette.requests import Request

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from scribe.api.errors import ResponsePolicy

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware:
    """Logs every request and its response status and duration."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = uuid.uuid4().hex[:8]
        scope.setdefault("state", {})["request_id"] = request_id
        request = Request(scope)
        start = time.perf_counter()

        logger.info(
            "Request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params) or None,
                "ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent"),
            },
        )

        status: dict[str, Any] = {"code": None}

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status["code"] = message["status"]
                MutableHeaders(scope=message)["X-Request-ID"] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "Response",
                extra={
                    "request_id": request_id,
                    "status_code": status["code"],
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )


class ErrorBoundaryMiddleware:
    """Renders any exception that escaped the route through the response policy."""

    def __init__(self, app: ASGIApp, policy: ResponsePolicy) -> None:
        self.app = app
        self.policy = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            if response_started:
                raise
            response = self.policy.respond(Request(scope), exc)
            await response(scope, receive, send)
