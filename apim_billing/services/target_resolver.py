"""Resolve which APIM instance an inbound request operates on."""

from __future__ import annotations

from typing import Mapping

from apim_billing.core.config import Settings
from apim_billing.core.exceptions import ConfigurationError, MissingTargetHeaderError
from apim_billing.core.logging import get_logger
from apim_billing.core.models import RESOURCE_GROUP_HEADER, SERVICE_NAME_HEADER, ApimTarget

logger = get_logger(__name__)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TargetResolver:
    """Build an :class:`ApimTarget` from request headers or static configuration.

    Modes:
        ``headers``: both target headers are required on every request.
        ``static``: ``APIM_NAME``/``APIM_RESOURCE_GROUP`` from configuration.
        ``auto``: headers when both are present, otherwise static configuration.

    The Azure subscription id always comes from ``AZURE_SUBSCRIPTION_ID``.
    """

    def __init__(self, settings: Settings) -> None:
        self._mode = settings.APIM_TARGET_MODE
        self._subscription_id = _clean(settings.AZURE_SUBSCRIPTION_ID)
        self._static_service = _clean(settings.APIM_NAME)
        self._static_resource_group = _clean(settings.APIM_RESOURCE_GROUP)

    @property
    def mode(self) -> str:
        return self._mode

    def resolve(self, headers: Mapping[str, str]) -> ApimTarget:
        """Return the target for a request carrying ``headers``.

        Raises:
            MissingTargetHeaderError: header mode and a target header is absent.
            ConfigurationError: required configuration is missing.
        """
        subscription_id = self._require_subscription_id()
        if self._mode == "static":
            return self._static_target(subscription_id)

        service_name = _clean(_header(headers, SERVICE_NAME_HEADER))
        resource_group = _clean(_header(headers, RESOURCE_GROUP_HEADER))
        if service_name and resource_group:
            logger.debug("Using APIM service from headers: %s/%s", resource_group, service_name)
            return ApimTarget(subscription_id, resource_group, service_name)

        if self._mode == "auto" and self._static_service and self._static_resource_group:
            return self._static_target(subscription_id)

        if not service_name:
            raise MissingTargetHeaderError(f"{SERVICE_NAME_HEADER} header is required")
        raise MissingTargetHeaderError(f"{RESOURCE_GROUP_HEADER} header is required")

    def static_target(self) -> ApimTarget:
        """Return the configured default target (used outside HTTP requests)."""
        return self._static_target(self._require_subscription_id())

    def _require_subscription_id(self) -> str:
        if not self._subscription_id:
            raise ConfigurationError("AZURE_SUBSCRIPTION_ID is required in configuration")
        return self._subscription_id

    def _static_target(self, subscription_id: str) -> ApimTarget:
        if not self._static_service:
            raise ConfigurationError("APIM_NAME is required in configuration")
        if not self._static_resource_group:
            raise ConfigurationError("APIM_RESOURCE_GROUP is required in configuration")
        return ApimTarget(subscription_id, self._static_resource_group, self._static_service)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


__all__ = [
    "RESOURCE_GROUP_HEADER",
    "SERVICE_NAME_HEADER",
    "TargetResolver",
]
