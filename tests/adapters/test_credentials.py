"""Tests for ARM token providers."""
# pylint: disable=missing-function-docstring

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from apim_billing.adapters.credentials import (
    AzureCredentialTokenProvider,
    StaticTokenProvider,
    build_token_provider,
)
from apim_billing.core.config import ARM_SCOPE


def test_azure_provider_requests_arm_scope():
    credential = AsyncMock()
    credential.get_token.return_value = SimpleNamespace(token="arm-token", expires_on=0)
    provider = AzureCredentialTokenProvider(credential)

    assert asyncio.run(provider.get_token()) == "arm-token"
    credential.get_token.assert_awaited_once_with(ARM_SCOPE)

    asyncio.run(provider.close())
    credential.close.assert_awaited_once()


def test_static_provider_returns_token():
    assert asyncio.run(StaticTokenProvider("abc").get_token()) == "abc"


def test_static_provider_rejects_empty_token():
    with pytest.raises(ValueError):
        StaticTokenProvider("")


def test_build_token_provider_prefers_static_token():
    assert isinstance(build_token_provider("abc"), StaticTokenProvider)


def test_build_token_provider_defaults_to_azure_credential(monkeypatch):
    sentinel = AsyncMock()
    monkeypatch.setattr(
        "apim_billing.adapters.credentials.DefaultAzureCredential", lambda: sentinel
    )
    provider = build_token_provider(None)
    assert isinstance(provider, AzureCredentialTokenProvider)
