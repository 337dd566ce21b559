"""Core data transfer objects shared across layers."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SERVICE_NAME_HEADER = "X-APIM-ServiceName"
RESOURCE_GROUP_HEADER = "X-APIM-ResourceGroup"


@dataclass(frozen=True, slots=True)
class ApimTarget:
    """Coordinates of the APIM instance a single request operates on."""

    subscription_id: str
    resource_group: str
    service_name: str

    @property
    def service_path(self) -> str:
        """ARM resource path of the APIM service."""
        return (
            f"/subscriptions/{self.subscription_id}"
            f"/resourceGroups/{self.resource_group}"
            f"/providers/Microsoft.ApiManagement/service/{self.service_name}"
        )

    def product_scope(self, product_id: str) -> str:
        """Return the scope string binding a subscription to ``product_id``."""
        return f"{self.service_path}/products/{product_id}"


class ApimInstance(BaseModel):
    """An APIM instance a web user may choose to work against."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    service_name: str
    resource_group: str
    display_name: str | None = Field(default=None)
    description: str | None = Field(default=None)

    @property
    def label(self) -> str:
        """Name shown to users, defaulting to the service name."""
        return self.display_name or self.service_name


__all__ = [
    "RESOURCE_GROUP_HEADER",
    "SERVICE_NAME_HEADER",
    "ApimInstance",
    "ApimTarget",
]
