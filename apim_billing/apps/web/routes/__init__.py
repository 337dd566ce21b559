"""Web frontend route modules."""

from . import home, instances, products, subscriptions

__all__ = ["home", "instances", "products", "subscriptions"]
