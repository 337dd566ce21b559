"""Application bootstrap helpers for assembling the service container."""

from __future__ import annotations

from apim_billing.adapters.arm_client import ApimSubscriptionClient
from apim_billing.adapters.credentials import build_token_provider
from apim_billing.core.config import Settings, settings as default_settings
from apim_billing.services import ServiceContainer, build_default_services


def build_default_service_container(settings: Settings | None = None) -> ServiceContainer:
    """Return the default service container wired to production adapters."""

    cfg = settings or default_settings
    token_provider = build_token_provider(cfg.ARM_ACCESS_TOKEN)
    arm_client = ApimSubscriptionClient(
        token_provider,
        base_url=cfg.ARM_BASE_URL,
        api_version=cfg.ARM_API_VERSION,
        timeout=cfg.ARM_REQUEST_TIMEOUT_SECONDS,
        optimistic_concurrency=cfg.ARM_OPTIMISTIC_CONCURRENCY,
    )
    return build_default_services(
        settings=cfg,
        arm_client=arm_client,
        token_provider=token_provider,
    )


__all__ = ["build_default_service_container"]
