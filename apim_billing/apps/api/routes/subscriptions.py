"""Subscription purchase and lifecycle endpoints.

Every route requires the ``X-APIM-ServiceName`` and ``X-APIM-ResourceGroup``
headers unless the backend runs with a static APIM target.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from apim_billing.apps.api.dependencies import BillingDependency, TargetDependency
from apim_billing.core.api_models import (
    PurchaseRequest,
    PurchaseResponse,
    RotateKeyRequest,
    SubscriptionInfo,
    UpdateSubscriptionRequest,
)
from apim_billing.core.logging import get_logger

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])
logger = get_logger(__name__)


@router.get("", response_model=list[SubscriptionInfo])
async def get_all_subscriptions(
    billing: BillingDependency,
    target: TargetDependency,
    email: str | None = None,
) -> list[SubscriptionInfo]:
    """Get all subscriptions, or only those owned by ``email``."""
    return await billing.get_subscriptions_by_email(target, email)


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase_product(
    request: PurchaseRequest,
    billing: BillingDependency,
    target: TargetDependency,
) -> PurchaseResponse:
    """Purchase a product and create an APIM subscription."""
    logger.info("Purchase request received for product: %s", request.product_id)
    return await billing.process_purchase(target, request)


@router.get("/{subscription_id}", response_model=SubscriptionInfo)
async def get_subscription(
    subscription_id: str,
    billing: BillingDependency,
    target: TargetDependency,
) -> SubscriptionInfo:
    """Get subscription details including keys."""
    return await billing.get_subscription_info(target, subscription_id)


@router.patch("/{subscription_id}/state", response_model=SubscriptionInfo)
async def update_subscription_state(
    subscription_id: str,
    request: UpdateSubscriptionRequest,
    billing: BillingDependency,
    target: TargetDependency,
) -> SubscriptionInfo:
    """Update subscription state (activate/suspend/cancel)."""
    logger.info("Update subscription %s - action: %s", subscription_id, request.action)
    return await billing.update_subscription(target, subscription_id, request.action)


@router.post("/{subscription_id}/rotate-key", response_model=SubscriptionInfo)
async def rotate_key(
    subscription_id: str,
    request: RotateKeyRequest,
    billing: BillingDependency,
    target: TargetDependency,
) -> SubscriptionInfo:
    """Rotate a subscription key and return the subscription with its new keys."""
    logger.info("Rotate %s key for subscription %s", request.key_type, subscription_id)
    await billing.rotate_key(target, subscription_id, request.key_type)
    return await billing.get_subscription_info(target, subscription_id)


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_subscription(
    subscription_id: str,
    billing: BillingDependency,
    target: TargetDependency,
) -> Response:
    """Cancel and delete a subscription."""
    logger.info("Cancel subscription: %s", subscription_id)
    await billing.cancel_subscription(target, subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
