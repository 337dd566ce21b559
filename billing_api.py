"""Top-level ASGI entrypoint for the billing REST API (``uvicorn billing_api:app``)."""

from apim_billing.api_factory import create_api_app

app = create_api_app()

__all__ = ["app"]
