"""Protocol definitions for infrastructure adapters."""

# pylint: disable=unnecessary-ellipsis

from __future__ import annotations

from typing import Protocol

from apim_billing.core.arm_models import (
    ApimProductList,
    ApimSubscription,
    ApimSubscriptionList,
    ApimUser,
    SubscriptionKeys,
)
from apim_billing.core.models import ApimTarget


class TokenProviderPort(Protocol):
    """Port supplying bearer tokens for Azure Resource Manager."""

    async def get_token(self) -> str:
        """Return a fresh access token for the ARM audience."""
        ...

    async def close(self) -> None:
        """Release any underlying credential resources."""
        ...


class ApimSubscriptionPort(Protocol):
    """Port exposing the APIM user, product and subscription operations."""

    async def ensure_user(
        self, target: ApimTarget, email: str, first_name: str, last_name: str
    ) -> tuple[ApimUser, bool]:
        """Return the user for ``email`` and whether it was created by this call."""
        ...

    async def create_or_get_user(
        self, target: ApimTarget, email: str, first_name: str, last_name: str
    ) -> ApimUser:
        """Return the existing user for ``email`` or create one."""
        ...

    async def get_user_by_email(self, target: ApimTarget, email: str) -> ApimUser | None:
        """Return the user whose email matches, or ``None``."""
        ...

    async def delete_user(self, target: ApimTarget, user_name: str) -> None:
        """Delete the user resource named ``user_name``."""
        ...

    async def create_subscription(
        self,
        target: ApimTarget,
        name: str,
        product_id: str,
        display_name: str,
        owner_id: str | None = None,
    ) -> ApimSubscription:
        """Create an active subscription scoped to ``product_id``."""
        ...

    async def get_subscription_keys(self, target: ApimTarget, name: str) -> SubscriptionKeys:
        """Return the primary and secondary keys of ``name``."""
        ...

    async def get_subscription(self, target: ApimTarget, name: str) -> ApimSubscription:
        """Return the subscription resource ``name``."""
        ...

    async def list_all_subscriptions(self, target: ApimTarget) -> ApimSubscriptionList:
        """Return the first page of subscriptions on the instance."""
        ...

    async def list_apim_products(self, target: ApimTarget) -> ApimProductList:
        """Return the first page of products on the instance."""
        ...

    async def update_subscription_state(self, target: ApimTarget, name: str, state: str) -> None:
        """Change the state of ``name`` while preserving scope and display name."""
        ...

    async def regenerate_primary_key(self, target: ApimTarget, name: str) -> None:
        """Regenerate the primary key of ``name``."""
        ...

    async def regenerate_secondary_key(self, target: ApimTarget, name: str) -> None:
        """Regenerate the secondary key of ``name``."""
        ...

    async def delete_subscription(self, target: ApimTarget, name: str) -> None:
        """Delete the subscription ``name``."""
        ...


__all__ = ["ApimSubscriptionPort", "TokenProviderPort"]
