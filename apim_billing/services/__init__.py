"""Application service layer wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from apim_billing.core.config import Settings
from apim_billing.core.ports import ApimSubscriptionPort, TokenProviderPort

from .billing import BillingService
from .target_resolver import TargetResolver


@dataclass(slots=True)
class ServiceContainer:
    """Aggregate of application-level services available to handlers."""

    billing: BillingService
    target_resolver: TargetResolver
    arm_client: Optional[ApimSubscriptionPort] = None
    token_provider: Optional[TokenProviderPort] = None

    async def aclose(self) -> None:
        """Release credential resources held by the container."""
        if self.token_provider is not None:
            await self.token_provider.close()


def build_default_services(
    *,
    settings: Settings,
    arm_client: ApimSubscriptionPort,
    token_provider: Optional[TokenProviderPort] = None,
) -> ServiceContainer:
    """Return a service container around ``arm_client``."""

    return ServiceContainer(
        billing=BillingService(arm_client, failure_policy=settings.PURCHASE_FAILURE_POLICY),
        target_resolver=TargetResolver(settings),
        arm_client=arm_client,
        token_provider=token_provider,
    )


__all__ = ["BillingService", "ServiceContainer", "TargetResolver", "build_default_services"]
