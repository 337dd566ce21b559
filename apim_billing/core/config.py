"""Application configuration loaded via Pydantic settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from apim_billing.core.exceptions import ConfigurationError

ARM_SCOPE = "https://management.azure.com/.default"


class Settings(BaseSettings):
    """Typed configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Target APIM instance
    AZURE_SUBSCRIPTION_ID: str | None = Field(default=None)
    APIM_NAME: str | None = Field(default=None)
    APIM_RESOURCE_GROUP: str | None = Field(default=None)
    APIM_TARGET_MODE: Literal["headers", "static", "auto"] = Field(default="auto")

    # Azure Resource Manager
    ARM_BASE_URL: str = Field(default="https://management.azure.com")
    ARM_API_VERSION: str = Field(default="2024-05-01")
    ARM_REQUEST_TIMEOUT_SECONDS: float = Field(default=30.0)
    ARM_ACCESS_TOKEN: str | None = Field(default=None)
    ARM_OPTIMISTIC_CONCURRENCY: bool = Field(default=True)
    PURCHASE_FAILURE_POLICY: Literal["none", "rollback"] = Field(default="none")

    # Web frontend
    BILLING_API_BASE_URL: str | None = Field(default=None)
    BILLING_API_TIMEOUT_SECONDS: float = Field(default=30.0)
    WEB_SESSION_SECRET: str | None = Field(default=None)
    WEB_SESSION_MAX_AGE_SECONDS: int = Field(default=30 * 60)
    APIM_INSTANCES: list[dict[str, Any]] = Field(default_factory=list)

    CORS_ALLOW_ORIGINS: list[str] = Field(default_factory=lambda: ["*"])
    APPLICATIONINSIGHTS_CONNECTION_STRING: str | None = Field(default=None)

    APIM_BILLING_LOG_LEVEL: str = Field(default="info")
    APIM_BILLING_LOG_DIR: Path | None = Field(default=None)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def validate_api_settings(cfg: Settings) -> None:
    """Fail fast when the backend cannot resolve a target for any request."""
    errors: list[str] = []
    if _blank(cfg.AZURE_SUBSCRIPTION_ID):
        errors.append("AZURE_SUBSCRIPTION_ID is required")
    if cfg.APIM_TARGET_MODE == "static":
        if _blank(cfg.APIM_NAME):
            errors.append("APIM_NAME is required")
        if _blank(cfg.APIM_RESOURCE_GROUP):
            errors.append("APIM_RESOURCE_GROUP is required")
    if cfg.ARM_REQUEST_TIMEOUT_SECONDS <= 0:
        errors.append("ARM_REQUEST_TIMEOUT_SECONDS must be positive")
    if errors:
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors))


def validate_web_settings(cfg: Settings) -> None:
    """Fail fast when the web frontend is missing its backend or session secret."""
    errors: list[str] = []
    if _blank(cfg.BILLING_API_BASE_URL):
        errors.append("BILLING_API_BASE_URL is required")
    if _blank(cfg.WEB_SESSION_SECRET):
        errors.append("WEB_SESSION_SECRET is required")
    if cfg.BILLING_API_TIMEOUT_SECONDS <= 0:
        errors.append("BILLING_API_TIMEOUT_SECONDS must be positive")
    if errors:
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(errors))


settings = Settings()
config = settings  # Alias for backward compatibility


__all__ = [
    "ARM_SCOPE",
    "Settings",
    "settings",
    "config",
    "validate_api_settings",
    "validate_web_settings",
]
