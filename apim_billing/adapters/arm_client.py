"""Azure Resource Manager client for APIM users, products and subscriptions."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, TypeVar

import httpx
from pydantic import BaseModel

from apim_billing.core.arm_models import (
    ApimProductList,
    ApimSubscription,
    ApimSubscriptionList,
    ApimUser,
    ApimUserList,
    SubscriptionKeys,
    subscription_body,
    user_body,
)
from apim_billing.core.exceptions import (
    ArmRequestError,
    ConcurrencyConflictError,
    InvalidUpstreamResourceError,
)
from apim_billing.core.logging import get_logger
from apim_billing.core.models import ApimTarget
from apim_billing.core.ports import ApimSubscriptionPort, TokenProviderPort

logger = get_logger(__name__)

DEFAULT_ARM_BASE_URL = "https://management.azure.com"
DEFAULT_API_VERSION = "2024-05-01"
DEFAULT_TIMEOUT_SECONDS = 30.0

ModelT = TypeVar("ModelT", bound=BaseModel)


def derive_user_id(email: str) -> str:
    """Return the deterministic APIM user name for ``email``."""
    return email.lower().replace("@", "-at-").replace(".", "-")


class ApimSubscriptionClient(ApimSubscriptionPort):
    """Translate typed APIM operations into ARM REST calls.

    The client is stateless with respect to the APIM instance: every call takes
    the :class:`ApimTarget` resolved for the current request. A bearer token is
    requested from the token provider for each call.
    """

    def __init__(
        self,
        token_provider: TokenProviderPort,
        *,
        base_url: str = DEFAULT_ARM_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        optimistic_concurrency: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token_provider = token_provider
        self._base_url = base_url.rstrip("/")
        self._api_version = api_version
        self._timeout = timeout
        self._optimistic_concurrency = optimistic_concurrency
        self._transport = transport

    # ------------------------------------------------------------------ users

    async def ensure_user(
        self, target: ApimTarget, email: str, first_name: str, last_name: str
    ) -> tuple[ApimUser, bool]:
        existing = await self.get_user_by_email(target, email)
        if existing is not None:
            logger.info("User already exists: %s for email: %s", existing.id, email)
            return existing, False

        user_id = derive_user_id(email)
        logger.info("Creating new APIM user: %s (%s)", user_id, email)
        response = await self._send(
            "PUT",
            self._url(target, f"users/{user_id}"),
            json=user_body(
                email=email,
                first_name=first_name,
                last_name=last_name if last_name.strip() else first_name,
            ),
        )
        user = ApimUser.model_validate(response.json())
        logger.info("Created APIM user: %s", user_id)
        return user, True

    async def create_or_get_user(
        self, target: ApimTarget, email: str, first_name: str, last_name: str
    ) -> ApimUser:
        user, _ = await self.ensure_user(target, email, first_name, last_name)
        return user

    async def get_user_by_email(self, target: ApimTarget, email: str) -> ApimUser | None:
        """Return the user for ``email`` or ``None``.

        ARM offers no server-side email filter, so the full user list is
        fetched and matched case-insensitively. Lookup failures are logged and
        reported as "no user" so callers can degrade to empty results.
        """
        logger.info("Looking up APIM user by email: %s", email)
        try:
            users = await self._send_model("GET", self._url(target, "users"), ApimUserList)
        except (ArmRequestError, httpx.HTTPError, ValueError) as exc:
            logger.warning("Failed to lookup user by email %s: %s", email, exc)
            return None

        wanted = email.casefold()
        for user in users.value:
            if user.email is not None and user.email.casefold() == wanted:
                logger.info("Found user: %s for email: %s", user.id, email)
                return user
        logger.info("No user found for email: %s", email)
        return None

    async def delete_user(self, target: ApimTarget, user_name: str) -> None:
        await self._send("DELETE", self._url(target, f"users/{user_name}"))
        logger.info("Deleted APIM user: %s", user_name)

    # ---------------------------------------------------------- subscriptions

    async def create_subscription(
        self,
        target: ApimTarget,
        name: str,
        product_id: str,
        display_name: str,
        owner_id: str | None = None,
    ) -> ApimSubscription:
        subscription = await self._send_model(
            "PUT",
            self._url(target, f"subscriptions/{name}"),
            ApimSubscription,
            json=subscription_body(
                scope=target.product_scope(product_id),
                display_name=display_name,
                state="active",
                owner_id=owner_id,
            ),
        )
        logger.info(
            "Created APIM subscription: %s for product: %s, owner: %s",
            name,
            product_id,
            owner_id or "none",
        )
        return subscription

    async def get_subscription_keys(self, target: ApimTarget, name: str) -> SubscriptionKeys:
        keys = await self._send_model(
            "POST", self._url(target, f"subscriptions/{name}", "listSecrets"), SubscriptionKeys
        )
        logger.info("Retrieved keys for subscription: %s", name)
        return keys

    async def get_subscription(self, target: ApimTarget, name: str) -> ApimSubscription:
        response = await self._send("GET", self._url(target, f"subscriptions/{name}"))
        subscription = ApimSubscription.model_validate(response.json())
        subscription.etag = response.headers.get("ETag")
        return subscription

    async def list_all_subscriptions(self, target: ApimTarget) -> ApimSubscriptionList:
        subscriptions = await self._send_model(
            "GET", self._url(target, "subscriptions"), ApimSubscriptionList
        )
        logger.info("Retrieved %d subscriptions from APIM", len(subscriptions.value))
        return subscriptions

    async def list_apim_products(self, target: ApimTarget) -> ApimProductList:
        products = await self._send_model("GET", self._url(target, "products"), ApimProductList)
        logger.info("Retrieved %d products from APIM", len(products.value))
        return products

    async def update_subscription_state(self, target: ApimTarget, name: str, state: str) -> None:
        """Read-modify-write the subscription state.

        When optimistic concurrency is enabled the PUT is conditional on the
        ETag returned by the GET; otherwise the last writer wins.
        """
        existing = await self.get_subscription(target, name)
        properties = existing.properties
        if properties is None or not properties.scope:
            raise InvalidUpstreamResourceError(f"Subscription {name} has no scope to preserve")

        headers: dict[str, str] = {}
        if self._optimistic_concurrency and existing.etag:
            headers["If-Match"] = existing.etag

        try:
            await self._send(
                "PUT",
                self._url(target, f"subscriptions/{name}"),
                json=subscription_body(
                    scope=properties.scope,
                    display_name=properties.display_name or name,
                    state=state,
                ),
                headers=headers,
            )
        except ArmRequestError as exc:
            if exc.status_code == HTTPStatus.PRECONDITION_FAILED:
                raise ConcurrencyConflictError(name) from exc
            raise
        logger.info("Updated subscription %s state to: %s", name, state)

    async def regenerate_primary_key(self, target: ApimTarget, name: str) -> None:
        await self._send("POST", self._url(target, f"subscriptions/{name}", "regeneratePrimaryKey"))
        logger.info("Regenerated primary key for subscription: %s", name)

    async def regenerate_secondary_key(self, target: ApimTarget, name: str) -> None:
        await self._send(
            "POST", self._url(target, f"subscriptions/{name}", "regenerateSecondaryKey")
        )
        logger.info("Regenerated secondary key for subscription: %s", name)

    async def delete_subscription(self, target: ApimTarget, name: str) -> None:
        await self._send("DELETE", self._url(target, f"subscriptions/{name}"))
        logger.info("Deleted subscription: %s", name)

    # ---------------------------------------------------------------- helpers

    def _url(self, target: ApimTarget, resource: str, action: str | None = None) -> str:
        url = f"{self._base_url}{target.service_path}/{resource}"
        if action:
            url = f"{url}/{action}"
        return url

    async def _send_model(
        self,
        method: str,
        url: str,
        model: type[ModelT],
        *,
        json: Any | None = None,
    ) -> ModelT:
        response = await self._send(method, url, json=json)
        return model.model_validate(response.json())

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json: Any | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        token = await self._token_provider.get_token()
        request_headers = {"Authorization": f"Bearer {token}"}
        if headers:
            request_headers.update(headers)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.request(
                method,
                url,
                params={"api-version": self._api_version},
                json=json,
                headers=request_headers,
            )

        if not response.is_success:
            logger.error("ARM API request failed: %s - %s", response.status_code, response.text)
            raise ArmRequestError(response.status_code, response.text, method=method, url=url)
        return response


__all__ = ["ApimSubscriptionClient", "derive_user_id"]
