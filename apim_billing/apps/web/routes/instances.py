"""Choose which APIM instance the session works against."""

from __future__ import annotations

from fastapi import APIRouter, Request

from apim_billing.apps.web.dependencies import InstancesDependency
from apim_billing.apps.web.routes.forms import SelectInstanceForm
from apim_billing.apps.web.session import flash, get_selected_instance, select_instance
from apim_billing.apps.web.views import redirect, view
from apim_billing.core.logging import get_logger
from apim_billing.core.models import ApimInstance

router = APIRouter(prefix="/instances", tags=["web"])
logger = get_logger(__name__)


@router.get("")
async def list_instances(request: Request, instances: InstancesDependency):
    selected = get_selected_instance(request.session)
    return view(
        request,
        "instances",
        instances=[instance.model_dump(by_alias=True) for instance in instances],
        selected=selected.model_dump(by_alias=True) if selected else None,
    )


@router.post("/select")
async def choose_instance(
    request: Request, form: SelectInstanceForm, instances: InstancesDependency
):
    """Store the chosen instance; when instances are configured, only those are accepted."""
    service_name = form.service_name.strip()
    resource_group = form.resource_group.strip()
    if not service_name or not resource_group:
        flash(request.session, "error", "Please choose an APIM instance.")
        return redirect("/instances")

    if instances:
        match = next(
            (
                instance
                for instance in instances
                if instance.service_name == service_name
                and instance.resource_group == resource_group
            ),
            None,
        )
        if match is None:
            logger.warning("Rejected unknown APIM instance %s/%s", resource_group, service_name)
            flash(request.session, "error", "Unknown APIM instance.")
            return redirect("/instances")
        chosen = match
    else:
        chosen = ApimInstance(service_name=service_name, resource_group=resource_group)

    select_instance(request.session, chosen)
    flash(request.session, "success", f"Now using {chosen.label}.")
    return redirect("/products")
