"""Customer subscription pages and lifecycle actions."""

from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Request

from apim_billing.apps.web.dependencies import BillingApiDependency
from apim_billing.apps.web.routes.forms import PurchaseForm, RotateKeyForm
from apim_billing.apps.web.session import flash, get_user
from apim_billing.apps.web.views import redirect, view
from apim_billing.core.api_models import PurchaseRequest, SubscriptionInfo
from apim_billing.core.exceptions import BillingApiError
from apim_billing.core.logging import get_logger

router = APIRouter(prefix="/subscriptions", tags=["web"])
logger = get_logger(__name__)

_GATEWAY_ERRORS = (BillingApiError, httpx.HTTPError)
_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _details_url(subscription_id: str) -> str:
    return f"/subscriptions/{quote(subscription_id, safe='')}"


def _created(subscription: SubscriptionInfo) -> datetime:
    created = subscription.created_date
    if created is None:
        return _OLDEST
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


@router.get("/mine")
async def my_subscriptions(request: Request, billing_api: BillingApiDependency):
    email, _ = get_user(request.session)
    if not email:
        return redirect("/")

    try:
        subscriptions = await billing_api.get_subscriptions_by_email(email)
    except _GATEWAY_ERRORS:
        logger.exception("Failed to load subscriptions for %s", email)
        flash(request.session, "error", "Failed to load subscriptions. Please try again.")
        subscriptions = []
    subscriptions = sorted(subscriptions, key=_created, reverse=True)
    return view(request, "subscriptions", subscriptions=subscriptions)


@router.post("/purchase")
async def purchase(request: Request, form: PurchaseForm, billing_api: BillingApiDependency):
    email, name = get_user(request.session)
    if not email or not name:
        return redirect("/")

    product_name = form.product_name or form.product_id
    try:
        result = await billing_api.purchase_product(
            PurchaseRequest(product_id=form.product_id, customer_email=email, customer_name=name)
        )
    except _GATEWAY_ERRORS:
        logger.exception("Failed to purchase product %s", form.product_id)
        flash(request.session, "error", f"Failed to purchase {product_name}. Please try again.")
        return redirect("/products")

    flash(
        request.session,
        "success",
        f"Successfully purchased {product_name}! Your subscription is ready.",
    )
    return redirect(_details_url(result.subscription_id))


@router.get("/{subscription_id}")
async def details(request: Request, subscription_id: str, billing_api: BillingApiDependency):
    try:
        subscription = await billing_api.get_subscription(subscription_id)
    except _GATEWAY_ERRORS:
        logger.exception("Failed to load subscription %s", subscription_id)
        flash(request.session, "error", "Subscription not found.")
        return redirect("/products")
    return view(request, "subscription", subscription=subscription)


async def _change_state(
    request: Request,
    billing_api,
    subscription_id: str,
    action: str,
    success: str,
    failure: str,
):
    try:
        await billing_api.update_subscription_state(subscription_id, action)
    except _GATEWAY_ERRORS:
        logger.exception("Failed to %s subscription %s", action, subscription_id)
        flash(request.session, "error", failure)
    else:
        flash(request.session, "success", success)
    return redirect(_details_url(subscription_id))


@router.post("/{subscription_id}/suspend")
async def stop_paying(request: Request, subscription_id: str, billing_api: BillingApiDependency):
    return await _change_state(
        request,
        billing_api,
        subscription_id,
        "suspend",
        "Subscription suspended due to non-payment.",
        "Failed to suspend subscription. Please try again.",
    )


@router.post("/{subscription_id}/resume")
async def resume_paying(request: Request, subscription_id: str, billing_api: BillingApiDependency):
    return await _change_state(
        request,
        billing_api,
        subscription_id,
        "activate",
        "Subscription reactivated!",
        "Failed to activate subscription. Please try again.",
    )


@router.post("/{subscription_id}/decline")
async def decline_to_pay(request: Request, subscription_id: str, billing_api: BillingApiDependency):
    try:
        await billing_api.delete_subscription(subscription_id)
    except _GATEWAY_ERRORS:
        logger.exception("Failed to delete subscription %s", subscription_id)
        flash(request.session, "error", "Failed to cancel subscription. Please try again.")
        return redirect(_details_url(subscription_id))
    flash(request.session, "success", "Subscription cancelled and deleted.")
    return redirect("/products")


@router.post("/{subscription_id}/rotate-key")
async def rotate_key(
    request: Request,
    subscription_id: str,
    form: RotateKeyForm,
    billing_api: BillingApiDependency,
):
    try:
        await billing_api.rotate_key(subscription_id, form.key_type)
    except _GATEWAY_ERRORS:
        logger.exception(
            "Failed to rotate %s key for subscription %s", form.key_type, subscription_id
        )
        flash(request.session, "error", f"Failed to rotate {form.key_type} key. Please try again.")
    else:
        flash(request.session, "success", f"{form.key_type} key rotated successfully!")
    return redirect(_details_url(subscription_id))
