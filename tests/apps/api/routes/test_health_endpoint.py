"""Tests for the /health endpoint."""
# pylint: disable=missing-function-docstring

from http import HTTPStatus

from fastapi.testclient import TestClient

from apim_billing.apps.api.app import create_app
from apim_billing.core.config import settings
from apim_billing.services import build_default_services


def test_health_needs_no_target_headers(fake_client):
    services = build_default_services(settings=settings, arm_client=fake_client)
    client = TestClient(create_app(services))

    resp = client.get("/health")

    assert resp.status_code == HTTPStatus.OK
    body = resp.json()
    assert body["status"] == "healthy"
    assert "timestamp" in body
    assert resp.headers["X-Correlation-ID"]
    assert not fake_client.calls
