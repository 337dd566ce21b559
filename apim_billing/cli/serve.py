"""CLI commands that run the HTTP apps under uvicorn."""

from __future__ import annotations

import typer
import uvicorn

from apim_billing.core.logging import LEVEL_NAME

app = typer.Typer(name="serve", help="Run the billing API or web frontend")


@app.command("api")
def serve_api(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the billing REST API."""
    uvicorn.run(
        "apim_billing.api_factory:create_api_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=LEVEL_NAME.lower(),
    )


@app.command("web")
def serve_web(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the customer web frontend."""
    uvicorn.run(
        "apim_billing.api_factory:create_web_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=LEVEL_NAME.lower(),
    )
