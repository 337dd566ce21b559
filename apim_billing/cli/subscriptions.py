"""CLI commands for operating on APIM products and subscriptions."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

import httpx
import typer
from rich.console import Console
from rich.table import Table

from apim_billing.bootstrap import build_default_service_container
from apim_billing.core.api_models import PurchaseRequest, SubscriptionInfo
from apim_billing.core.config import settings
from apim_billing.core.exceptions import BillingError
from apim_billing.core.models import ApimTarget
from apim_billing.services import BillingService, ServiceContainer

app = typer.Typer(name="subscriptions", help="Manage APIM products and subscriptions")
console = Console()

T = TypeVar("T")

ServiceNameOption = typer.Option(
    None, "--service-name", "-s", help="APIM service name (defaults to APIM_NAME)"
)
ResourceGroupOption = typer.Option(
    None, "--resource-group", "-g", help="Resource group (defaults to APIM_RESOURCE_GROUP)"
)


def _get_services() -> ServiceContainer:
    """Get the service container with default adapters."""
    return build_default_service_container(settings)


def _target(service_name: str | None, resource_group: str | None) -> ApimTarget:
    service_name = service_name or settings.APIM_NAME
    resource_group = resource_group or settings.APIM_RESOURCE_GROUP
    missing = [
        name
        for name, value in (
            ("AZURE_SUBSCRIPTION_ID", settings.AZURE_SUBSCRIPTION_ID),
            ("--service-name/APIM_NAME", service_name),
            ("--resource-group/APIM_RESOURCE_GROUP", resource_group),
        )
        if not value
    ]
    if missing:
        console.print(f"[red]Error:[/red] missing {', '.join(missing)}")
        raise typer.Exit(1)
    return ApimTarget(settings.AZURE_SUBSCRIPTION_ID, resource_group, service_name)


def _run(operation: Callable[[BillingService], Awaitable[T]]) -> T:
    """Run ``operation`` against a fresh container and release it afterwards."""

    async def _main() -> T:
        services = _get_services()
        try:
            return await operation(services.billing)
        finally:
            await services.aclose()

    try:
        return asyncio.run(_main())
    except (BillingError, httpx.HTTPError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def _print_subscription(info: SubscriptionInfo) -> None:
    console.print(f"[bold]Subscription ID:[/bold] {info.subscription_id}")
    console.print(f"[bold]Name:[/bold] {info.subscription_name}")
    console.print(f"[bold]Product:[/bold] {info.product_id}")
    console.print(f"[bold]State:[/bold] {info.state}")
    if info.created_date:
        console.print(f"[bold]Created:[/bold] {info.created_date.isoformat()}")
    if info.primary_key:
        console.print(f"[bold]Primary key:[/bold] {info.primary_key}")
    if info.secondary_key:
        console.print(f"[bold]Secondary key:[/bold] {info.secondary_key}")


@app.command("products")
def list_products(
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """List published products."""
    target = _target(service_name, resource_group)
    products = _run(lambda billing: billing.get_products(target))

    if not products:
        console.print("[dim]No published products found.[/dim]")
        return

    table = Table(title=f"Products ({target.service_name})")
    table.add_column("Product ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description")
    for product in products:
        table.add_row(product.product_id, product.name, product.description)
    console.print(table)


@app.command("list")
def list_subscriptions(
    email: str | None = typer.Option(
        None, "--email", "-e", help="Only this customer's subscriptions"
    ),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """List subscriptions."""
    target = _target(service_name, resource_group)
    subscriptions = _run(lambda billing: billing.get_subscriptions_by_email(target, email))

    if not subscriptions:
        console.print("[dim]No subscriptions found.[/dim]")
        return

    table = Table(title="Subscriptions")
    table.add_column("Subscription ID", style="cyan")
    table.add_column("Name")
    table.add_column("Product")
    table.add_column("State")
    table.add_column("Created")
    for info in subscriptions:
        table.add_row(
            info.subscription_id,
            info.subscription_name,
            info.product_id,
            info.state,
            info.created_date.strftime("%Y-%m-%d %H:%M") if info.created_date else "-",
        )
    console.print(table)


@app.command("show")
def show_subscription(
    subscription_id: str = typer.Argument(..., help="Subscription resource name"),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """Show a subscription with its keys."""
    target = _target(service_name, resource_group)
    info = _run(lambda billing: billing.get_subscription_info(target, subscription_id))
    _print_subscription(info)


@app.command("purchase")
def purchase(
    product_id: str = typer.Option(..., "--product", "-p", help="Product ID"),
    email: str = typer.Option(..., "--email", "-e", help="Customer email"),
    name: str = typer.Option(..., "--name", "-n", help="Customer full name"),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """Purchase a product for a customer."""
    target = _target(service_name, resource_group)
    request = PurchaseRequest(product_id=product_id, customer_email=email, customer_name=name)
    result = _run(lambda billing: billing.process_purchase(target, request))

    console.print("\n[green]Subscription created successfully![/green]\n")
    console.print(f"[bold]Subscription ID:[/bold] {result.subscription_id}")
    console.print(f"[bold]Name:[/bold] {result.subscription_name}")
    console.print(f"[bold]State:[/bold] {result.state}")
    console.print(f"[bold]Primary key:[/bold] {result.primary_key}")
    console.print(f"[bold]Secondary key:[/bold] {result.secondary_key}")


@app.command("set-state")
def set_state(
    subscription_id: str = typer.Argument(..., help="Subscription resource name"),
    action: str = typer.Argument(..., help="activate, suspend or cancel"),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """Activate, suspend or cancel a subscription."""
    target = _target(service_name, resource_group)
    info = _run(lambda billing: billing.update_subscription(target, subscription_id, action))
    console.print(f"[green]Subscription '{info.subscription_id}' is now {info.state}.[/green]")


@app.command("rotate-key")
def rotate_key(
    subscription_id: str = typer.Argument(..., help="Subscription resource name"),
    key_type: str = typer.Option("primary", "--key", "-k", help="primary or secondary"),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """Regenerate a subscription key."""
    target = _target(service_name, resource_group)
    _run(lambda billing: billing.rotate_key(target, subscription_id, key_type))
    console.print(f"[green]{key_type} key rotated successfully![/green]")


@app.command("delete")
def delete_subscription(
    subscription_id: str = typer.Argument(..., help="Subscription resource name"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    service_name: str | None = ServiceNameOption,
    resource_group: str | None = ResourceGroupOption,
) -> None:
    """Delete a subscription."""
    target = _target(service_name, resource_group)

    if not force:
        confirm = typer.confirm(
            f"Are you sure you want to delete subscription '{subscription_id}'?"
        )
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            raise typer.Exit(0)

    _run(lambda billing: billing.cancel_subscription(target, subscription_id))
    console.print(f"[green]Subscription '{subscription_id}' has been deleted.[/green]")
