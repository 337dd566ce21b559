"""Bearer-token providers for Azure Resource Manager."""

from __future__ import annotations

from azure.identity.aio import DefaultAzureCredential

from apim_billing.core.config import ARM_SCOPE
from apim_billing.core.logging import get_logger
from apim_billing.core.ports import TokenProviderPort

logger = get_logger(__name__)


class AzureCredentialTokenProvider(TokenProviderPort):
    """Obtain ARM tokens from ``DefaultAzureCredential``.

    Managed identity is used when running in Azure; developer credentials
    (Azure CLI, environment variables) are picked up locally.
    """

    def __init__(self, credential: DefaultAzureCredential | None = None) -> None:
        self._credential = credential or DefaultAzureCredential()

    async def get_token(self) -> str:
        access_token = await self._credential.get_token(ARM_SCOPE)
        return access_token.token

    async def close(self) -> None:
        await self._credential.close()


class StaticTokenProvider(TokenProviderPort):
    """Return a fixed token, for local runs against a pre-issued ARM token."""

    def __init__(self, token: str) -> None:
        if not token:
            raise ValueError("Static ARM token cannot be empty")
        self._token = token

    async def get_token(self) -> str:
        return self._token

    async def close(self) -> None:
        return None


def build_token_provider(static_token: str | None = None) -> TokenProviderPort:
    """Prefer a configured static token, otherwise the Azure credential chain."""
    if static_token:
        logger.warning("Using static ARM access token from configuration")
        return StaticTokenProvider(static_token)
    return AzureCredentialTokenProvider()


__all__ = ["AzureCredentialTokenProvider", "StaticTokenProvider", "build_token_provider"]
