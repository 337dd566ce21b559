"""API factory entrypoints wiring default adapters to the FastAPI apps."""

from __future__ import annotations

from apim_billing.apps.api.app import create_app as _create_api_app
from apim_billing.apps.web.app import create_app as _create_web_app
from apim_billing.bootstrap import build_default_service_container
from apim_billing.core.config import settings, validate_api_settings


def create_api_app():  # noqa: D401 - FastAPI factory signature
    """Return the billing backend configured with the default service container."""

    validate_api_settings(settings)
    return _create_api_app(build_default_service_container(settings))


def create_web_app():  # noqa: D401 - FastAPI factory signature
    """Return the web frontend configured from the environment."""

    return _create_web_app(settings)


__all__ = ["create_api_app", "create_web_app"]
