"""Shared FastAPI dependencies for service access and target resolution."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from apim_billing.core.logging import bind_apim_service
from apim_billing.core.models import ApimTarget
from apim_billing.services import BillingService, ServiceContainer


def get_service_container(request: Request) -> ServiceContainer:
    """Retrieve the service container from app state."""
    services = getattr(request.app.state, "services", None)
    if not isinstance(services, ServiceContainer):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Service container not configured",
        )
    return services


def get_billing_service(
    container: Annotated[ServiceContainer, Depends(get_service_container)],
) -> BillingService:
    """Return the billing service bound to the active container."""
    return container.billing


async def get_apim_target(
    request: Request,
    container: Annotated[ServiceContainer, Depends(get_service_container)],
) -> ApimTarget:
    """Resolve the APIM instance targeted by the current request.

    Missing headers or configuration raise before any ARM call is made; the
    registered exception handlers turn them into 400/500 responses.

    The APIM service bound here stays in the request context for the route,
    the service and the ARM client until ``CorrelationIdMiddleware`` resets it.
    """
    target = container.target_resolver.resolve(request.headers)
    bind_apim_service(target.service_name)
    return target


BillingDependency = Annotated[BillingService, Depends(get_billing_service)]
TargetDependency = Annotated[ApimTarget, Depends(get_apim_target)]


__all__ = [
    "BillingDependency",
    "TargetDependency",
    "get_apim_target",
    "get_billing_service",
    "get_service_container",
]
