"""API request/response models shared by the billing backend and web frontend."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContractModel(BaseModel):
    """Base for REST contracts: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(ContractModel):
    """A published API product from APIM."""

    product_id: str = Field(..., description="APIM product resource name")
    name: str = Field(..., description="Display name, or the resource name when absent")
    description: str = Field(default="")
    state: str | None = Field(default=None)
    subscription_required: bool = Field(default=True)


class PurchaseRequest(ContractModel):
    """Request model for POST /api/subscriptions/purchase."""

    product_id: str = Field(..., min_length=1)
    customer_email: str = Field(..., min_length=1)
    customer_name: str = Field(..., min_length=1)


class PurchaseResponse(ContractModel):
    """Response returned after a successful purchase."""

    subscription_id: str
    subscription_name: str
    primary_key: str
    secondary_key: str
    product_id: str
    product_name: str
    state: str
    created_date: datetime | None = None


class SubscriptionInfo(ContractModel):
    """Subscription status; keys are only populated for single-subscription reads."""

    subscription_id: str
    subscription_name: str
    state: str
    product_id: str
    product_name: str | None = None
    primary_key: str | None = None
    secondary_key: str | None = None
    created_date: datetime | None = None


class UpdateSubscriptionRequest(ContractModel):
    """Request model for PATCH /api/subscriptions/{id}/state."""

    action: str = Field(..., description="activate, suspend or cancel")


class RotateKeyRequest(ContractModel):
    """Request model for POST /api/subscriptions/{id}/rotate-key."""

    key_type: str = Field(..., description="primary or secondary")


class HealthResponse(ContractModel):
    """Response model for GET /health."""

    status: str
    timestamp: datetime


__all__ = [
    "HealthResponse",
    "Product",
    "PurchaseRequest",
    "PurchaseResponse",
    "RotateKeyRequest",
    "SubscriptionInfo",
    "UpdateSubscriptionRequest",
]
