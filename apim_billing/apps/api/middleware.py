"""Per-request log context for the API and web apps."""

from __future__ import annotations

import time
import uuid
from http import HTTPStatus

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from apim_billing.core.logging import (
    bind_apim_service,
    bind_correlation_id,
    get_logger,
    reset_apim_service,
    reset_correlation_id,
)

logger = get_logger(__name__)

CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")


def correlation_id_from(headers: Headers) -> str:
    """Return the caller's request/correlation id, or a fresh one."""
    for name in CORRELATION_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return uuid.uuid4().hex


class CorrelationIdMiddleware:  # pylint: disable=too-few-public-methods
    """Scope the correlation id and APIM service log fields to one HTTP request.

    The correlation id is echoed on the response under both header names. The
    APIM service starts unset and is filled in by the ``get_apim_target``
    dependency once the target is resolved; both are restored on the way out.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = correlation_id_from(Headers(scope=scope))
        correlation_token = bind_correlation_id(correlation_id)
        service_token = bind_apim_service(None)
        started = time.perf_counter()
        status_code = int(HTTPStatus.INTERNAL_SERVER_ERROR)

        async def send_with_correlation_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                for name in CORRELATION_HEADERS:
                    if name not in headers:
                        headers.append(name, correlation_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_correlation_id)
        finally:
            logger.info(
                "%s %s -> %d",
                scope["method"],
                scope["path"],
                status_code,
                extra={
                    "event": "http_request",
                    "status_code": status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                },
            )
            reset_apim_service(service_token)
            reset_correlation_id(correlation_token)


__all__ = ["CORRELATION_HEADERS", "CorrelationIdMiddleware", "correlation_id_from"]
