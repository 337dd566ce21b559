"""Wire models for the Azure Resource Manager APIM surface.

Field names follow ARM's camelCase JSON; unknown fields are ignored so new
ARM API versions do not break parsing.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArmModel(BaseModel):
    """Base for ARM payloads: camelCase aliases, tolerant of extra fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ProductProperties(ArmModel):
    display_name: str | None = None
    description: str | None = None
    state: str | None = None
    subscription_required: bool = True
    approval_required: bool = False


class ApimProduct(ArmModel):
    id: str | None = None
    name: str | None = None
    properties: ProductProperties | None = None


class UserProperties(ArmModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    state: str | None = None


class ApimUser(ArmModel):
    id: str | None = None
    name: str | None = None
    properties: UserProperties | None = None

    @property
    def email(self) -> str | None:
        return self.properties.email if self.properties else None


class SubscriptionProperties(ArmModel):
    scope: str | None = None
    display_name: str | None = None
    owner_id: str | None = None
    state: str | None = None
    created_date: datetime | None = None
    primary_key: str | None = None
    secondary_key: str | None = None


class ApimSubscription(ArmModel):
    id: str | None = None
    name: str | None = None
    properties: SubscriptionProperties | None = None
    etag: str | None = Field(default=None, exclude=True)


class SubscriptionKeys(ArmModel):
    primary_key: str | None = None
    secondary_key: str | None = None


class ApimProductList(ArmModel):
    value: list[ApimProduct] = Field(default_factory=list)
    next_link: str | None = None


class ApimUserList(ArmModel):
    value: list[ApimUser] = Field(default_factory=list)
    next_link: str | None = None


class ApimSubscriptionList(ArmModel):
    value: list[ApimSubscription] = Field(default_factory=list)
    next_link: str | None = None


def subscription_body(
    *, scope: str, display_name: str, state: str, owner_id: str | None = None
) -> dict:
    """Build the PUT payload for creating or updating a subscription."""
    properties: dict = {
        "scope": scope,
        "displayName": display_name,
        "state": state,
        "allowTracing": True,
    }
    if owner_id is not None:
        properties["ownerId"] = owner_id
    return {"properties": properties}


def user_body(*, email: str, first_name: str, last_name: str) -> dict:
    """Build the PUT payload for creating an APIM user."""
    return {
        "properties": {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "state": "active",
        }
    }


__all__ = [
    "ApimProduct",
    "ApimProductList",
    "ApimSubscription",
    "ApimSubscriptionList",
    "ApimUser",
    "ApimUserList",
    "ProductProperties",
    "SubscriptionKeys",
    "SubscriptionProperties",
    "UserProperties",
    "subscription_body",
    "user_body",
]
