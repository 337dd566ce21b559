"""Tests for the FastAPI app factories."""
# pylint: disable=missing-function-docstring

import asyncio
from unittest.mock import AsyncMock

import pytest

from apim_billing import api_factory
from apim_billing.adapters.arm_client import ApimSubscriptionClient
from apim_billing.adapters.credentials import StaticTokenProvider
from apim_billing.apps.api.app import create_app, lifespan
from apim_billing.bootstrap import build_default_service_container
from apim_billing.core.config import Settings, settings
from apim_billing.core.exceptions import ConfigurationError
from apim_billing.services import build_default_services


def _paths(app) -> set[str]:
    return {path for route in app.router.routes if (path := getattr(route, "path", ""))}


def test_create_app_has_routes(fake_client):
    app = create_app(build_default_services(settings=settings, arm_client=fake_client))
    paths = _paths(app)
    assert "/health" in paths
    assert "/api/products" in paths
    assert "/api/subscriptions/purchase" in paths
    assert "/api/subscriptions/{subscription_id}/rotate-key" in paths
    assert app.state.services.arm_client is fake_client


def test_create_app_requires_services():
    with pytest.raises(RuntimeError):
        create_app(None)


def test_lifespan_closes_token_provider(fake_client):
    token_provider = AsyncMock()
    services = build_default_services(
        settings=settings, arm_client=fake_client, token_provider=token_provider
    )
    app = create_app(services)

    async def _exercise() -> None:
        async with lifespan(app):
            token_provider.close.assert_not_awaited()

    asyncio.run(_exercise())
    token_provider.close.assert_awaited_once()


def test_default_container_wires_configured_adapters():
    cfg = Settings(
        _env_file=None,
        AZURE_SUBSCRIPTION_ID="sub",
        ARM_ACCESS_TOKEN="tok",
        PURCHASE_FAILURE_POLICY="rollback",
    )
    container = build_default_service_container(cfg)
    assert isinstance(container.arm_client, ApimSubscriptionClient)
    assert isinstance(container.token_provider, StaticTokenProvider)
    assert container.billing.failure_policy == "rollback"


def test_create_api_app_validates_settings(monkeypatch):
    monkeypatch.delenv("AZURE_SUBSCRIPTION_ID", raising=False)
    monkeypatch.setattr(api_factory, "settings", Settings(_env_file=None))
    with pytest.raises(ConfigurationError):
        api_factory.create_api_app()


def test_create_web_app_uses_environment():
    app = api_factory.create_web_app()
    assert "/subscriptions/mine" in _paths(app)
