"""Router namespace exports for FastAPI include hooks."""

from . import health, products, subscriptions

__all__ = ["health", "products", "subscriptions"]
