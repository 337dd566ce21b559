"""HTTP client the web frontend uses to talk to the billing backend."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter

from apim_billing.core.api_models import (
    Product,
    PurchaseRequest,
    PurchaseResponse,
    RotateKeyRequest,
    SubscriptionInfo,
    UpdateSubscriptionRequest,
)
from apim_billing.core.exceptions import BillingApiError
from apim_billing.core.logging import get_logger
from apim_billing.core.models import RESOURCE_GROUP_HEADER, SERVICE_NAME_HEADER, ApimInstance

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0

_PRODUCTS = TypeAdapter(list[Product])
_SUBSCRIPTIONS = TypeAdapter(list[SubscriptionInfo])


class BillingApiClient:
    """Mirror of the billing REST surface, scoped to one web request.

    The APIM instance selected in the user's session is attached to every
    outbound call as ``X-APIM-ServiceName``/``X-APIM-ResourceGroup``. Without a
    selection the headers are omitted and the backend falls back to its own
    default target, if it has one.
    """

    def __init__(
        self,
        base_url: str,
        *,
        instance: ApimInstance | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        correlation_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._instance = instance
        self._timeout = timeout
        self._correlation_id = correlation_id
        self._transport = transport

    @property
    def instance(self) -> ApimInstance | None:
        return self._instance

    async def get_products(self) -> list[Product]:
        logger.info("Fetching products from Billing API")
        response = await self._request("GET", "/api/products")
        products = _PRODUCTS.validate_python(response.json() or [])
        logger.info("Retrieved %d products", len(products))
        return products

    async def purchase_product(self, request: PurchaseRequest) -> PurchaseResponse:
        logger.info(
            "Purchasing product: %s for %s", request.product_id, request.customer_email
        )
        response = await self._request(
            "POST", "/api/subscriptions/purchase", json=_dump(request)
        )
        result = PurchaseResponse.model_validate(response.json())
        logger.info("Purchase successful - subscription: %s", result.subscription_id)
        return result

    async def get_subscription(self, subscription_id: str) -> SubscriptionInfo:
        logger.info("Getting subscription: %s", subscription_id)
        response = await self._request("GET", f"/api/subscriptions/{_segment(subscription_id)}")
        return SubscriptionInfo.model_validate(response.json())

    async def get_subscriptions_by_email(self, email: str) -> list[SubscriptionInfo]:
        logger.info("Getting subscriptions for email: %s", email)
        response = await self._request("GET", "/api/subscriptions", params={"email": email})
        return _SUBSCRIPTIONS.validate_python(response.json() or [])

    async def update_subscription_state(
        self, subscription_id: str, action: str
    ) -> SubscriptionInfo:
        logger.info("Updating subscription %s - action: %s", subscription_id, action)
        response = await self._request(
            "PATCH",
            f"/api/subscriptions/{_segment(subscription_id)}/state",
            json=_dump(UpdateSubscriptionRequest(action=action)),
        )
        return SubscriptionInfo.model_validate(response.json())

    async def rotate_key(self, subscription_id: str, key_type: str) -> None:
        logger.info("Rotating %s key for subscription %s", key_type, subscription_id)
        await self._request(
            "POST",
            f"/api/subscriptions/{_segment(subscription_id)}/rotate-key",
            json=_dump(RotateKeyRequest(key_type=key_type)),
        )

    async def delete_subscription(self, subscription_id: str) -> None:
        logger.info("Deleting subscription: %s", subscription_id)
        await self._request("DELETE", f"/api/subscriptions/{_segment(subscription_id)}")

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self._instance is not None:
            headers[SERVICE_NAME_HEADER] = self._instance.service_name
            headers[RESOURCE_GROUP_HEADER] = self._instance.resource_group
        else:
            logger.warning(
                "No APIM instance selected in session; calling Billing API without target headers"
            )
        if self._correlation_id:
            headers["X-Correlation-ID"] = self._correlation_id
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        ) as client:
            response = await client.request(
                method, path, json=json, params=params, headers=self._headers()
            )
        if not response.is_success:
            logger.error(
                "Billing API %s %s failed: %s - %s",
                method,
                path,
                response.status_code,
                response.text,
            )
            raise BillingApiError(response.status_code, response.text)
        return response


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def _segment(value: str) -> str:
    return quote(value, safe="")


__all__ = ["BillingApiClient"]
