"""FastAPI application factory for the billing backend."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apim_billing.apps.api.errors import register_exception_handlers
from apim_billing.apps.api.middleware import CorrelationIdMiddleware
from apim_billing.core.config import settings
from apim_billing.core.logging import get_logger
from apim_billing.services import ServiceContainer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup details and release credentials on shutdown."""
    services = getattr(app.state, "services", None)
    resolver = services.target_resolver if isinstance(services, ServiceContainer) else None
    logger.info(
        "Starting APIM billing API (target mode: %s)", resolver.mode if resolver else "unset"
    )
    if settings.APPLICATIONINSIGHTS_CONNECTION_STRING:
        logger.info("Application Insights connection string configured")
    try:
        yield
    finally:
        if isinstance(services, ServiceContainer):
            await services.aclose()
        logger.info("APIM billing API stopped")


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Build the FastAPI application with configured routers."""
    if services is None:
        raise RuntimeError("Service container must be provided when creating the app.")
    app = FastAPI(
        title="APIM Billing API",
        version="v1",
        description=(
            "API for managing Azure APIM subscriptions and billing. Requests must include "
            "the X-APIM-ServiceName and X-APIM-ResourceGroup headers unless the service "
            "runs with a static APIM target."
        ),
        lifespan=lifespan,
    )
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(app)

    # Import lazily to avoid potential circular imports when routers grow.
    from .routes import health, products, subscriptions  # pylint: disable=import-outside-toplevel

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(subscriptions.router)
    return app


__all__ = ["create_app", "lifespan"]
