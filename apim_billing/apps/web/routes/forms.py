"""Request bodies accepted by the web frontend."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WebForm(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SetUserForm(WebForm):
    email: str = ""
    name: str = ""


class SelectInstanceForm(WebForm):
    service_name: str = ""
    resource_group: str = ""


class PurchaseForm(WebForm):
    product_id: str
    product_name: str = ""


class RotateKeyForm(WebForm):
    key_type: str


__all__ = ["PurchaseForm", "RotateKeyForm", "SelectInstanceForm", "SetUserForm"]
