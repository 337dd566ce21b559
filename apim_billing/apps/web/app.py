"""FastAPI application factory for the customer-facing web frontend."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import TypeAdapter
from starlette.middleware.sessions import SessionMiddleware

from apim_billing.apps.api.middleware import CorrelationIdMiddleware
from apim_billing.core.config import Settings, settings, validate_web_settings
from apim_billing.core.logging import get_logger
from apim_billing.core.models import ApimInstance

logger = get_logger(__name__)

_INSTANCES = TypeAdapter(list[ApimInstance])


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg: Settings = app.state.settings
    logger.info(
        "Starting APIM billing web frontend (backend: %s, %d configured instances)",
        cfg.BILLING_API_BASE_URL,
        len(app.state.instances),
    )
    yield
    logger.info("APIM billing web frontend stopped")


def create_app(cfg: Settings | None = None) -> FastAPI:
    """Build the web frontend app; configuration is validated eagerly."""
    cfg = cfg or settings
    validate_web_settings(cfg)

    app = FastAPI(title="APIM Billing Web", version="v1", lifespan=lifespan)
    app.state.settings = cfg
    app.state.instances = _INSTANCES.validate_python(cfg.APIM_INSTANCES)
    app.add_middleware(
        SessionMiddleware,
        secret_key=cfg.WEB_SESSION_SECRET,
        max_age=cfg.WEB_SESSION_MAX_AGE_SECONDS,
        same_site="lax",
    )
    app.add_middleware(CorrelationIdMiddleware)

    # pylint: disable-next=import-outside-toplevel
    from .routes import home, instances, products, subscriptions

    app.include_router(home.router)
    app.include_router(instances.router)
    app.include_router(products.router)
    app.include_router(subscriptions.router)
    return app


__all__ = ["create_app"]
