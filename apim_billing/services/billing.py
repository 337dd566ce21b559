"""Billing orchestration: products, purchases and subscription lifecycle."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Callable, Iterator, Literal

from apim_billing.core.api_models import (
    Product,
    PurchaseRequest,
    PurchaseResponse,
    SubscriptionInfo,
)
from apim_billing.core.arm_models import ApimSubscription, ApimUser, SubscriptionKeys
from apim_billing.core.exceptions import (
    ArmRequestError,
    InvalidActionError,
    InvalidKeyTypeError,
    ProductNotFoundError,
    SubscriptionNotFoundError,
)
from apim_billing.core.logging import get_logger
from apim_billing.core.models import ApimTarget
from apim_billing.core.ports import ApimSubscriptionPort

logger = get_logger(__name__)

PurchaseFailurePolicy = Literal["none", "rollback"]

PUBLISHED_STATE = "published"
UNKNOWN_PRODUCT = "unknown"

ACTION_STATES = {
    "activate": "active",
    "suspend": "suspended",
    "cancel": "cancelled",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_subscription_name(email: str, product_id: str, now: datetime) -> str:
    """Return ``{productId}-{emailLocalPart}-{yyyyMMddHHmmss}`` in lower case."""
    email_prefix = email.split("@", 1)[0]
    return f"{product_id}-{email_prefix}-{now.strftime('%Y%m%d%H%M%S')}".lower()


def extract_product_id_from_scope(scope: str | None) -> str:
    """Return the path segment after ``products`` in ``scope``, or ``"unknown"``."""
    if not scope:
        return UNKNOWN_PRODUCT
    parts = scope.split("/")
    try:
        index = parts.index("products")
    except ValueError:
        return UNKNOWN_PRODUCT
    if index + 1 < len(parts) and parts[index + 1]:
        return parts[index + 1]
    return UNKNOWN_PRODUCT


def split_customer_name(customer_name: str) -> tuple[str, str]:
    """Split on the first space into first and last name."""
    first, _, last = customer_name.partition(" ")
    return first, last


def _to_subscription_info(
    subscription: ApimSubscription, keys: SubscriptionKeys | None = None
) -> SubscriptionInfo:
    properties = subscription.properties
    product_id = extract_product_id_from_scope(properties.scope if properties else None)
    return SubscriptionInfo(
        subscription_id=subscription.name or "",
        subscription_name=(properties.display_name if properties else None) or "",
        state=(properties.state if properties else None) or "",
        product_id=product_id,
        product_name=product_id,
        primary_key=keys.primary_key if keys else None,
        secondary_key=keys.secondary_key if keys else None,
        created_date=properties.created_date if properties else None,
    )


@contextmanager
def _existing_subscription(subscription_id: str) -> Iterator[None]:
    """Turn an upstream 404 into ``SubscriptionNotFoundError``."""
    try:
        yield
    except ArmRequestError as exc:
        if exc.status_code == HTTPStatus.NOT_FOUND:
            raise SubscriptionNotFoundError(subscription_id) from exc
        raise


class BillingService:
    """Compose ARM client calls into the product/purchase/lifecycle surface."""

    def __init__(
        self,
        client: ApimSubscriptionPort,
        *,
        failure_policy: PurchaseFailurePolicy = "none",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._client = client
        self._failure_policy = failure_policy
        self._clock = clock

    @property
    def failure_policy(self) -> PurchaseFailurePolicy:
        return self._failure_policy

    async def get_products(self, target: ApimTarget) -> list[Product]:
        """Return the published products of the target instance."""
        logger.info("Fetching products from APIM")
        listing = await self._client.list_apim_products(target)
        products = [
            Product(
                product_id=item.name or "",
                name=(item.properties.display_name if item.properties else None)
                or item.name
                or "",
                description=(item.properties.description if item.properties else None) or "",
                state=item.properties.state if item.properties else None,
                subscription_required=(
                    item.properties.subscription_required if item.properties else True
                ),
            )
            for item in listing.value
            if item.properties is not None and item.properties.state == PUBLISHED_STATE
        ]
        logger.info("Retrieved %d published products from APIM", len(products))
        return products

    async def process_purchase(
        self, target: ApimTarget, request: PurchaseRequest
    ) -> PurchaseResponse:
        """Create (or reuse) the APIM user and a new subscription for the product.

        The steps are separate ARM calls. With the ``rollback`` failure policy a
        failed step undoes the resources this purchase created; with ``none``
        partial results are left in APIM.
        """
        logger.info(
            "Processing purchase for %s - product: %s", request.customer_email, request.product_id
        )

        products = await self.get_products(target)
        product = next((p for p in products if p.product_id == request.product_id), None)
        if product is None:
            raise ProductNotFoundError(request.product_id)

        first_name, last_name = split_customer_name(request.customer_name)
        user, user_created = await self._client.ensure_user(
            target, request.customer_email, first_name, last_name
        )
        logger.info("User created/retrieved: %s", user.id)

        subscription_name = generate_subscription_name(
            request.customer_email, request.product_id, self._clock()
        )
        display_name = f"{request.customer_name} - {product.name}"

        try:
            subscription = await self._client.create_subscription(
                target, subscription_name, request.product_id, display_name, user.id
            )
        except Exception:
            if user_created:
                await self._compensate_user(target, user)
            raise

        try:
            keys = await self._client.get_subscription_keys(target, subscription_name)
        except Exception:
            await self._compensate_subscription(target, subscription_name)
            raise

        logger.info("Purchase completed - subscription: %s", subscription_name)
        properties = subscription.properties
        return PurchaseResponse(
            subscription_id=subscription.name or subscription_name,
            subscription_name=(properties.display_name if properties else None) or display_name,
            primary_key=keys.primary_key or "",
            secondary_key=keys.secondary_key or "",
            product_id=request.product_id,
            product_name=product.name,
            state=(properties.state if properties else None) or "active",
            created_date=properties.created_date if properties else None,
        )

    async def get_subscription_info(
        self, target: ApimTarget, subscription_id: str
    ) -> SubscriptionInfo:
        """Return a subscription with its keys."""
        # Both reads run to completion so neither failure is left unretrieved.
        subscription, keys = await asyncio.gather(
            self._client.get_subscription(target, subscription_id),
            self._client.get_subscription_keys(target, subscription_id),
            return_exceptions=True,
        )
        with _existing_subscription(subscription_id):
            for result in (subscription, keys):
                if isinstance(result, BaseException):
                    raise result
        return _to_subscription_info(subscription, keys)

    async def get_subscriptions_by_email(
        self, target: ApimTarget, email: str | None = None
    ) -> list[SubscriptionInfo]:
        """List subscriptions, optionally only those owned by ``email``'s user."""
        logger.info("Fetching subscriptions from APIM for email: %s", email or "all")
        listing = await self._client.list_all_subscriptions(target)

        if not email:
            return [_to_subscription_info(sub) for sub in listing.value]

        user = await self._client.get_user_by_email(target, email)
        if user is None or not user.id:
            logger.warning("No user found for email: %s", email)
            return []

        owner_id = user.id.casefold()
        subscriptions = [
            _to_subscription_info(sub)
            for sub in listing.value
            if sub.properties is not None
            and sub.properties.owner_id is not None
            and sub.properties.owner_id.casefold() == owner_id
        ]
        logger.info(
            "Retrieved %d subscriptions from APIM for email %s", len(subscriptions), email
        )
        return subscriptions

    async def update_subscription(
        self, target: ApimTarget, subscription_id: str, action: str
    ) -> SubscriptionInfo:
        """Apply a lifecycle action and return the refreshed subscription."""
        logger.info("Updating subscription %s - action: %s", subscription_id, action)
        new_state = ACTION_STATES.get(action.lower())
        if new_state is None:
            raise InvalidActionError(action)

        with _existing_subscription(subscription_id):
            await self._client.update_subscription_state(target, subscription_id, new_state)
        return await self.get_subscription_info(target, subscription_id)

    async def rotate_key(self, target: ApimTarget, subscription_id: str, key_type: str) -> None:
        """Regenerate the primary or secondary key."""
        logger.info("Rotating %s key for subscription %s", key_type, subscription_id)
        normalized = key_type.lower()
        if normalized == "primary":
            regenerate = self._client.regenerate_primary_key
        elif normalized == "secondary":
            regenerate = self._client.regenerate_secondary_key
        else:
            raise InvalidKeyTypeError(key_type)
        with _existing_subscription(subscription_id):
            await regenerate(target, subscription_id)

    async def cancel_subscription(self, target: ApimTarget, subscription_id: str) -> None:
        """Delete the subscription; a subscription that is already gone counts as deleted."""
        logger.info("Cancelling subscription: %s", subscription_id)
        try:
            await self._client.delete_subscription(target, subscription_id)
        except ArmRequestError as exc:
            if exc.status_code != HTTPStatus.NOT_FOUND:
                raise
            logger.info("Subscription %s already absent", subscription_id)

    async def _compensate_subscription(self, target: ApimTarget, subscription_name: str) -> None:
        if self._failure_policy != "rollback":
            logger.error(
                "Subscription %s was created but its keys could not be fetched", subscription_name
            )
            return
        try:
            await self._client.delete_subscription(target, subscription_name)
            logger.warning("Rolled back subscription %s after failed purchase", subscription_name)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to roll back subscription %s", subscription_name)

    async def _compensate_user(self, target: ApimTarget, user: ApimUser) -> None:
        if self._failure_policy != "rollback" or not user.name:
            return
        try:
            await self._client.delete_user(target, user.name)
            logger.warning("Rolled back user %s after failed purchase", user.name)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Failed to roll back user %s", user.name)


__all__ = [
    "ACTION_STATES",
    "BillingService",
    "PurchaseFailurePolicy",
    "extract_product_id_from_scope",
    "generate_subscription_name",
    "split_customer_name",
]
