"""FastAPI dependencies for the web frontend."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from apim_billing.apps.web.gateway import BillingApiClient
from apim_billing.apps.web.session import get_selected_instance
from apim_billing.core.config import Settings
from apim_billing.core.logging import get_correlation_id
from apim_billing.core.models import ApimInstance


def get_settings(request: Request) -> Settings:
    cfg = getattr(request.app.state, "settings", None)
    if not isinstance(cfg, Settings):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Web settings not configured",
        )
    return cfg


def get_instances(request: Request) -> list[ApimInstance]:
    """Return the APIM instances users may pick from."""
    return list(getattr(request.app.state, "instances", []))


def get_billing_api(
    request: Request,
    cfg: Annotated[Settings, Depends(get_settings)],
) -> BillingApiClient:
    """Build a backend client carrying this session's APIM selection."""
    return BillingApiClient(
        cfg.BILLING_API_BASE_URL or "",
        instance=get_selected_instance(request.session),
        timeout=cfg.BILLING_API_TIMEOUT_SECONDS,
        correlation_id=get_correlation_id(),
    )


BillingApiDependency = Annotated[BillingApiClient, Depends(get_billing_api)]
InstancesDependency = Annotated[list[ApimInstance], Depends(get_instances)]


__all__ = [
    "BillingApiDependency",
    "InstancesDependency",
    "get_billing_api",
    "get_instances",
    "get_settings",
]
