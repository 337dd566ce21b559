"""Core exception types shared across layers."""

from __future__ import annotations


class BillingError(Exception):
    """Base class for errors raised by the billing backend."""


class ConfigurationError(BillingError):
    """Raised when required settings or target coordinates are missing."""


class MissingTargetHeaderError(ConfigurationError):
    """Raised when a request omits the headers naming its APIM instance."""


class NotFoundError(BillingError):
    """Raised when a requested resource does not exist."""


class ProductNotFoundError(NotFoundError):
    """Raised when a product is absent from the published catalog."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class SubscriptionNotFoundError(NotFoundError):
    """Raised when an APIM subscription cannot be found."""

    def __init__(self, subscription_id: str) -> None:
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


class InvalidRequestError(BillingError):
    """Raised when a caller supplies an unsupported argument."""


class InvalidActionError(InvalidRequestError):
    """Raised for subscription actions other than activate/suspend/cancel."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Invalid action: {action}")
        self.action = action


class InvalidKeyTypeError(InvalidRequestError):
    """Raised for key types other than primary/secondary."""

    def __init__(self, key_type: str) -> None:
        super().__init__(f"Invalid key type: {key_type}")
        self.key_type = key_type


class ConcurrencyConflictError(BillingError):
    """Raised when a conditional ARM update loses a race (HTTP 412)."""

    def __init__(self, subscription_id: str) -> None:
        super().__init__(
            f"Subscription {subscription_id} was modified concurrently; reload and retry"
        )
        self.subscription_id = subscription_id


class InvalidUpstreamResourceError(BillingError):
    """Raised when ARM returns a resource missing fields the backend relies on."""


class ArmRequestError(BillingError):
    """Raised when Azure Resource Manager answers with a non-success status."""

    def __init__(self, status_code: int, body: str, *, method: str = "", url: str = "") -> None:
        super().__init__(f"ARM API request failed: {status_code} - {body}")
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url


class BillingApiError(Exception):
    """Raised by the web gateway when the billing backend returns an error status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Billing API request failed: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


__all__ = [
    "ArmRequestError",
    "BillingApiError",
    "BillingError",
    "ConcurrencyConflictError",
    "ConfigurationError",
    "InvalidActionError",
    "InvalidKeyTypeError",
    "InvalidRequestError",
    "InvalidUpstreamResourceError",
    "MissingTargetHeaderError",
    "NotFoundError",
    "ProductNotFoundError",
    "SubscriptionNotFoundError",
]
