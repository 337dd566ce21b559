"""Map billing exceptions onto problem-detail HTTP responses."""

from __future__ import annotations

from http import HTTPStatus

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from apim_billing.core.exceptions import (
    ArmRequestError,
    BillingError,
    ConcurrencyConflictError,
    ConfigurationError,
    InvalidRequestError,
    InvalidUpstreamResourceError,
    MissingTargetHeaderError,
    NotFoundError,
)
from apim_billing.core.logging import get_logger

logger = get_logger(__name__)

# Checked in order; the first matching class wins.
_ERROR_MAP: tuple[tuple[type[BillingError], HTTPStatus, str], ...] = (
    (MissingTargetHeaderError, HTTPStatus.BAD_REQUEST, "Missing APIM target"),
    (ConfigurationError, HTTPStatus.INTERNAL_SERVER_ERROR, "Configuration error"),
    (NotFoundError, HTTPStatus.NOT_FOUND, "Not found"),
    (InvalidRequestError, HTTPStatus.BAD_REQUEST, "Invalid request"),
    (ConcurrencyConflictError, HTTPStatus.CONFLICT, "Conflict"),
    (ArmRequestError, HTTPStatus.INTERNAL_SERVER_ERROR, "Upstream request failed"),
    (InvalidUpstreamResourceError, HTTPStatus.INTERNAL_SERVER_ERROR, "Invalid upstream resource"),
)


def problem(status_code: int, title: str, detail: str) -> JSONResponse:
    """Build a problem-detail response body."""
    return JSONResponse(
        status_code=status_code,
        content={"title": title, "detail": detail, "status": status_code},
    )


async def billing_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Translate a :class:`BillingError` into its HTTP status."""
    for error_type, status_code, title in _ERROR_MAP:
        if isinstance(exc, error_type):
            break
    else:
        status_code, title = HTTPStatus.INTERNAL_SERVER_ERROR, "Request failed"

    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return problem(status_code, title, str(exc))


async def transport_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report network failures talking to ARM."""
    logger.error("%s %s upstream transport error: %s", request.method, request.url.path, exc)
    return problem(
        HTTPStatus.INTERNAL_SERVER_ERROR, "Upstream request failed", f"{type(exc).__name__}: {exc}"
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the billing exception handlers on ``app``."""
    app.add_exception_handler(BillingError, billing_error_handler)
    app.add_exception_handler(httpx.HTTPError, transport_error_handler)


__all__ = ["billing_error_handler", "problem", "register_exception_handlers"]
