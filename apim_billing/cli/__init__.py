"""CLI commands for the APIM billing services."""

import typer

from apim_billing.cli.serve import app as serve_app
from apim_billing.cli.subscriptions import app as subscriptions_app

main_app = typer.Typer(
    name="apim-billing",
    help="APIM billing operator CLI",
    no_args_is_help=True,
)
main_app.add_typer(subscriptions_app, name="subscriptions")
main_app.add_typer(serve_app, name="serve")


def main() -> None:
    """Entry point for the CLI."""
    main_app()


__all__ = ["main", "main_app"]
