"""Tests for the operator CLI."""
# pylint: disable=missing-function-docstring,redefined-outer-name

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from apim_billing.cli import main_app
from apim_billing.core.config import settings
from apim_billing.core.exceptions import ArmRequestError, InvalidUpstreamResourceError
from apim_billing.core.models import ApimTarget
from apim_billing.services import build_default_services

runner = CliRunner()


@pytest.fixture
def default_target() -> ApimTarget:
    return ApimTarget(
        settings.AZURE_SUBSCRIPTION_ID, settings.APIM_RESOURCE_GROUP, settings.APIM_NAME
    )


@pytest.fixture
def services(fake_client):
    container = build_default_services(settings=settings, arm_client=fake_client)
    with patch("apim_billing.cli.subscriptions._get_services", return_value=container):
        yield container


def test_products(services, fake_client, default_target):
    fake_client.add_product(default_target, "P1", "Widgets")

    result = runner.invoke(main_app, ["subscriptions", "products"])

    assert result.exit_code == 0, result.output
    assert "P1" in result.output
    assert "Widgets" in result.output


def test_products_for_other_instance(services, fake_client):
    other = ApimTarget(settings.AZURE_SUBSCRIPTION_ID, "rg-x", "apim-x")
    fake_client.add_product(other, "X1", "Other")

    result = runner.invoke(
        main_app, ["subscriptions", "products", "--service-name", "apim-x", "-g", "rg-x"]
    )

    assert result.exit_code == 0, result.output
    assert "X1" in result.output
    assert fake_client.calls[0][1] == "apim-x"


def test_purchase_prints_keys(services, fake_client, default_target):
    fake_client.add_product(default_target, "P1", "Widgets")

    result = runner.invoke(
        main_app,
        ["subscriptions", "purchase", "-p", "P1", "-e", "a@b.com", "-n", "Jane Doe"],
    )

    assert result.exit_code == 0, result.output
    assert "Subscription created successfully" in result.output
    assert "pk-p1-a-" in result.output


def test_show_missing_subscription_fails(services):
    result = runner.invoke(main_app, ["subscriptions", "show", "missing"])
    assert result.exit_code == 1
    assert "Subscription not found: missing" in result.output


def test_list_by_email(services, fake_client, default_target):
    user = fake_client.add_user(default_target, "a@b.com")
    fake_client.add_subscription(default_target, "S1", "P1", owner_id=user.id)

    result = runner.invoke(main_app, ["subscriptions", "list", "--email", "a@b.com"])

    assert result.exit_code == 0, result.output
    assert "S1" in result.output


def test_set_state(services, fake_client, default_target):
    fake_client.add_subscription(default_target, "S1", "P1")

    result = runner.invoke(main_app, ["subscriptions", "set-state", "S1", "suspend"])

    assert result.exit_code == 0, result.output
    assert "suspended" in result.output


def test_set_state_rejects_unknown_action(services, fake_client):
    result = runner.invoke(main_app, ["subscriptions", "set-state", "S1", "pause"])
    assert result.exit_code == 1
    assert "Invalid action: pause" in result.output
    assert not fake_client.calls


def test_set_state_on_missing_subscription_fails(services):
    result = runner.invoke(main_app, ["subscriptions", "set-state", "nope", "suspend"])
    assert result.exit_code == 1
    assert "Subscription not found: nope" in result.output


def test_set_state_on_scopeless_subscription_fails_cleanly(services, fake_client, default_target):
    fake_client.add_subscription(default_target, "S1", "P1")
    fake_client.fail_on["update_subscription_state"] = InvalidUpstreamResourceError(
        "Subscription S1 has no scope to preserve"
    )

    result = runner.invoke(main_app, ["subscriptions", "set-state", "S1", "suspend"])

    assert result.exit_code == 1
    assert "has no scope to preserve" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)


def test_rotate_key(services, fake_client, default_target):
    fake_client.add_subscription(default_target, "S1", "P1")

    result = runner.invoke(main_app, ["subscriptions", "rotate-key", "S1", "--key", "secondary"])

    assert result.exit_code == 0, result.output
    assert fake_client.names("regenerate_secondary_key") == ["regenerate_secondary_key"]


def test_delete_asks_for_confirmation(services, fake_client, default_target):
    fake_client.add_subscription(default_target, "S1", "P1")

    result = runner.invoke(main_app, ["subscriptions", "delete", "S1"], input="n\n")

    assert result.exit_code == 0
    assert "Aborted" in result.output
    assert not fake_client.names("delete_subscription")


def test_delete_with_force(services, fake_client, default_target):
    fake_client.add_subscription(default_target, "S1", "P1")

    result = runner.invoke(main_app, ["subscriptions", "delete", "S1", "--force"])

    assert result.exit_code == 0, result.output
    assert "S1" not in fake_client.subscriptions[default_target.service_name]


def test_upstream_error_exits_non_zero(services, fake_client):
    fake_client.fail_on["list_all_subscriptions"] = ArmRequestError(503, "unavailable")

    result = runner.invoke(main_app, ["subscriptions", "list"])

    assert result.exit_code == 1
    assert "503" in result.output


def test_serve_api_runs_uvicorn_factory():
    with patch("apim_billing.cli.serve.uvicorn.run") as run:
        result = runner.invoke(main_app, ["serve", "api", "--port", "9000"])

    assert result.exit_code == 0, result.output
    args, kwargs = run.call_args
    assert args == ("apim_billing.api_factory:create_api_app",)
    assert kwargs["factory"] is True
    assert kwargs["port"] == 9000


def test_serve_web_runs_uvicorn_factory():
    with patch("apim_billing.cli.serve.uvicorn.run") as run:
        result = runner.invoke(main_app, ["serve", "web"])

    assert result.exit_code == 0, result.output
    assert run.call_args.args == ("apim_billing.api_factory:create_web_app",)
