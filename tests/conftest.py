"""Pytest configuration: ensure env vars and import path are set early.

This runs before any tests, so modules can import without local path hacks.
Also load .env before setting defaults so real settings are used when present.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Ensure repository root is on sys.path for local package imports
sys.path.append(str(Path(__file__).resolve().parents[1]))

load_dotenv(override=False)

# Ensure required env vars exist for config import in app (fallbacks only)
os.environ.setdefault("AZURE_SUBSCRIPTION_ID", "00000000-0000-0000-0000-000000000000")
os.environ.setdefault("APIM_NAME", "apim-default")
os.environ.setdefault("APIM_RESOURCE_GROUP", "rg-default")
os.environ.setdefault("ARM_ACCESS_TOKEN", "test-token")
os.environ.setdefault("BILLING_API_BASE_URL", "http://billing.test")
os.environ.setdefault("WEB_SESSION_SECRET", "test-secret")

# pylint: disable=wrong-import-position
from apim_billing.adapters.arm_client import derive_user_id  # noqa: E402
from apim_billing.core.arm_models import (  # noqa: E402
    ApimProduct,
    ApimProductList,
    ApimSubscription,
    ApimSubscriptionList,
    ApimUser,
    ProductProperties,
    SubscriptionKeys,
    SubscriptionProperties,
    UserProperties,
)
from apim_billing.core.exceptions import ArmRequestError  # noqa: E402
from apim_billing.core.models import ApimTarget  # noqa: E402


class FakeApimClient:  # pylint: disable=too-many-public-methods
    """In-memory stand-in for the ARM client, one catalogue per APIM service.

    ``fail_on`` maps a method name to an exception raised on its next call.
    Every call is recorded in ``calls`` as ``(method, service_name, *args)``.
    """

    def __init__(self) -> None:
        self.products: dict[str, dict[str, ApimProduct]] = {}
        self.users: dict[str, dict[str, ApimUser]] = {}
        self.subscriptions: dict[str, dict[str, ApimSubscription]] = {}
        self.keys: dict[str, dict[str, SubscriptionKeys]] = {}
        self.calls: list[tuple] = []
        self.fail_on: dict[str, Exception] = {}
        self._counter = 0

    # seeding helpers

    def add_product(
        self, target: ApimTarget, product_id: str, display_name: str | None = None, *,
        state: str = "published", description: str | None = None,
    ) -> None:
        self.products.setdefault(target.service_name, {})[product_id] = ApimProduct(
            id=f"{target.service_path}/products/{product_id}",
            name=product_id,
            properties=ProductProperties(
                display_name=display_name, description=description, state=state
            ),
        )

    def add_user(self, target: ApimTarget, email: str) -> ApimUser:
        name = derive_user_id(email)
        user = ApimUser(
            id=f"{target.service_path}/users/{name}",
            name=name,
            properties=UserProperties(email=email, first_name="Seed", last_name="User"),
        )
        self.users.setdefault(target.service_name, {})[name] = user
        return user

    def add_subscription(
        self, target: ApimTarget, name: str, product_id: str, *,
        owner_id: str | None = None, state: str = "active",
        created: datetime | None = None,
    ) -> None:
        self.subscriptions.setdefault(target.service_name, {})[name] = ApimSubscription(
            id=f"{target.service_path}/subscriptions/{name}",
            name=name,
            properties=SubscriptionProperties(
                scope=target.product_scope(product_id),
                display_name=f"{name} display",
                owner_id=owner_id,
                state=state,
                created_date=created or datetime(2024, 1, 1, tzinfo=timezone.utc),
            ),
        )
        self.keys.setdefault(target.service_name, {})[name] = SubscriptionKeys(
            primary_key=f"pk-{name}", secondary_key=f"sk-{name}"
        )

    def names(self, method: str) -> list[str]:
        return [call[0] for call in self.calls if call[0] == method]

    # port implementation

    def _record(self, method: str, target: ApimTarget, *args) -> None:
        self.calls.append((method, target.service_name, *args))
        if method in self.fail_on:
            raise self.fail_on.pop(method)

    def _subscription(self, target: ApimTarget, name: str) -> ApimSubscription:
        subscription = self.subscriptions.get(target.service_name, {}).get(name)
        if subscription is None:
            raise ArmRequestError(404, '{"error":{"code":"ResourceNotFound"}}')
        return subscription

    async def ensure_user(self, target, email, first_name, last_name):
        self._record("ensure_user", target, email, first_name, last_name)
        existing = await self.get_user_by_email(target, email)
        if existing is not None:
            return existing, False
        name = derive_user_id(email)
        user = ApimUser(
            id=f"{target.service_path}/users/{name}",
            name=name,
            properties=UserProperties(
                email=email, first_name=first_name, last_name=last_name or first_name
            ),
        )
        self.users.setdefault(target.service_name, {})[name] = user
        return user, True

    async def create_or_get_user(self, target, email, first_name, last_name):
        user, _ = await self.ensure_user(target, email, first_name, last_name)
        return user

    async def get_user_by_email(self, target, email):
        self._record("get_user_by_email", target, email)
        for user in self.users.get(target.service_name, {}).values():
            if user.email and user.email.casefold() == email.casefold():
                return user
        return None

    async def delete_user(self, target, user_name):
        self._record("delete_user", target, user_name)
        self.users.get(target.service_name, {}).pop(user_name, None)

    async def create_subscription(self, target, name, product_id, display_name, owner_id=None):
        self._record("create_subscription", target, name, product_id, display_name, owner_id)
        self.add_subscription(
            target, name, product_id, owner_id=owner_id,
            created=datetime.now(timezone.utc),
        )
        subscription = self.subscriptions[target.service_name][name]
        assert subscription.properties is not None
        subscription.properties.display_name = display_name
        return subscription

    async def get_subscription_keys(self, target, name):
        self._record("get_subscription_keys", target, name)
        self._subscription(target, name)
        return self.keys[target.service_name][name]

    async def get_subscription(self, target, name):
        self._record("get_subscription", target, name)
        return self._subscription(target, name)

    async def list_all_subscriptions(self, target):
        self._record("list_all_subscriptions", target)
        return ApimSubscriptionList(
            value=list(self.subscriptions.get(target.service_name, {}).values())
        )

    async def list_apim_products(self, target):
        self._record("list_apim_products", target)
        return ApimProductList(value=list(self.products.get(target.service_name, {}).values()))

    async def update_subscription_state(self, target, name, state):
        self._record("update_subscription_state", target, name, state)
        subscription = self._subscription(target, name)
        assert subscription.properties is not None
        subscription.properties.state = state

    async def regenerate_primary_key(self, target, name):
        self._record("regenerate_primary_key", target, name)
        self._subscription(target, name)
        self._counter += 1
        self.keys[target.service_name][name].primary_key = f"pk-{name}-{self._counter}"

    async def regenerate_secondary_key(self, target, name):
        self._record("regenerate_secondary_key", target, name)
        self._subscription(target, name)
        self._counter += 1
        self.keys[target.service_name][name].secondary_key = f"sk-{name}-{self._counter}"

    async def delete_subscription(self, target, name):
        self._record("delete_subscription", target, name)
        self._subscription(target, name)
        del self.subscriptions[target.service_name][name]
        del self.keys[target.service_name][name]


@pytest.fixture
def target() -> ApimTarget:
    return ApimTarget("sub-123", "rg-a", "apim-a")


@pytest.fixture
def fake_client() -> FakeApimClient:
    return FakeApimClient()
