"""Tests for the web frontend's billing API client."""
# pylint: disable=missing-function-docstring
# ruff: noqa: PLR2004

import asyncio
import json
import logging

import httpx
import pytest

from apim_billing.apps.web.gateway import BillingApiClient
from apim_billing.core.api_models import PurchaseRequest
from apim_billing.core.exceptions import BillingApiError
from apim_billing.core.models import ApimInstance

INSTANCE = ApimInstance(service_name="apim-a", resource_group="rg-a")

SUBSCRIPTION = {
    "subscriptionId": "s/1",
    "subscriptionName": "Jane Doe - Widgets",
    "state": "active",
    "productId": "P1",
    "productName": "P1",
    "primaryKey": "pk",
    "secondaryKey": "sk",
    "createdDate": "2024-05-01T10:00:00Z",
}


def _client(handler, **kwargs) -> tuple[BillingApiClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = BillingApiClient(
        "http://billing.test/", transport=httpx.MockTransport(_record), **kwargs
    )
    return client, seen


def test_target_headers_and_correlation_id_are_forwarded():
    client, seen = _client(
        lambda _: httpx.Response(200, json=[]), instance=INSTANCE, correlation_id="cid-1"
    )

    asyncio.run(client.get_products())

    request = seen[0]
    assert request.url == "http://billing.test/api/products"
    assert request.headers["X-APIM-ServiceName"] == "apim-a"
    assert request.headers["X-APIM-ResourceGroup"] == "rg-a"
    assert request.headers["X-Correlation-ID"] == "cid-1"


def test_missing_instance_logs_warning_and_omits_headers(caplog):
    client, seen = _client(lambda _: httpx.Response(200, json=[]))

    with caplog.at_level(logging.WARNING):
        asyncio.run(client.get_products())

    assert "X-APIM-ServiceName" not in seen[0].headers
    assert any("No APIM instance selected" in r.getMessage() for r in caplog.records)


def test_purchase_posts_camel_case_body():
    def _handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content) == {
            "productId": "P1",
            "customerEmail": "a@b.com",
            "customerName": "Jane Doe",
        }
        return httpx.Response(
            200,
            json={
                "subscriptionId": "p1-a-1",
                "subscriptionName": "Jane Doe - Widgets",
                "primaryKey": "pk",
                "secondaryKey": "sk",
                "productId": "P1",
                "productName": "Widgets",
                "state": "active",
            },
        )

    client, seen = _client(_handler, instance=INSTANCE)

    result = asyncio.run(
        client.purchase_product(
            PurchaseRequest(product_id="P1", customer_email="a@b.com", customer_name="Jane Doe")
        )
    )

    assert seen[0].method == "POST"
    assert result.subscription_id == "p1-a-1"
    assert result.product_name == "Widgets"


def test_subscription_ids_are_path_escaped():
    client, seen = _client(lambda _: httpx.Response(200, json=SUBSCRIPTION), instance=INSTANCE)

    info = asyncio.run(client.get_subscription("s/1"))

    assert seen[0].url.raw_path == b"/api/subscriptions/s%2F1"
    assert info.created_date is not None and info.created_date.year == 2024


def test_subscriptions_by_email_query():
    client, seen = _client(lambda _: httpx.Response(200, json=[SUBSCRIPTION]), instance=INSTANCE)

    subscriptions = asyncio.run(client.get_subscriptions_by_email("a+b@c.com"))

    assert seen[0].url.params["email"] == "a+b@c.com"
    assert [s.subscription_id for s in subscriptions] == ["s/1"]


def test_state_rotate_and_delete_requests():
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PATCH":
            assert json.loads(request.content) == {"action": "suspend"}
            return httpx.Response(200, json={**SUBSCRIPTION, "state": "suspended"})
        if request.method == "POST":
            assert json.loads(request.content) == {"keyType": "secondary"}
            return httpx.Response(200, json=SUBSCRIPTION)
        return httpx.Response(204)

    client, seen = _client(_handler, instance=INSTANCE)

    updated = asyncio.run(client.update_subscription_state("S1", "suspend"))
    asyncio.run(client.rotate_key("S1", "secondary"))
    asyncio.run(client.delete_subscription("S1"))

    assert updated.state == "suspended"
    assert [(r.method, r.url.path) for r in seen] == [
        ("PATCH", "/api/subscriptions/S1/state"),
        ("POST", "/api/subscriptions/S1/rotate-key"),
        ("DELETE", "/api/subscriptions/S1"),
    ]


def test_error_status_raises_billing_api_error():
    client, _ = _client(
        lambda _: httpx.Response(404, json={"title": "Not found"}), instance=INSTANCE
    )

    with pytest.raises(BillingApiError) as exc_info:
        asyncio.run(client.get_subscription("missing"))

    assert exc_info.value.status_code == 404
