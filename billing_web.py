"""Top-level ASGI entrypoint for the web frontend (``uvicorn billing_web:app``)."""

from apim_billing.api_factory import create_web_app

app = create_web_app()

__all__ = ["app"]
