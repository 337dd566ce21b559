"""Infrastructure adapter exports."""

from apim_billing.core.exceptions import (  # noqa: F401
    ArmRequestError,
    ConcurrencyConflictError,
)

from .arm_client import ApimSubscriptionClient, derive_user_id
from .credentials import AzureCredentialTokenProvider, StaticTokenProvider, build_token_provider

__all__ = [
    "ApimSubscriptionClient",
    "ArmRequestError",
    "AzureCredentialTokenProvider",
    "ConcurrencyConflictError",
    "StaticTokenProvider",
    "build_token_provider",
    "derive_user_id",
]
