"""Product catalogue page."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Request

from apim_billing.apps.web.dependencies import BillingApiDependency
from apim_billing.apps.web.session import flash
from apim_billing.apps.web.views import view
from apim_billing.core.exceptions import BillingApiError
from apim_billing.core.logging import get_logger

router = APIRouter(tags=["web"])
logger = get_logger(__name__)


@router.get("/products")
async def list_products(request: Request, billing_api: BillingApiDependency):
    try:
        products = await billing_api.get_products()
    except (BillingApiError, httpx.HTTPError):
        logger.exception("Failed to load products")
        flash(request.session, "error", "Failed to load products. Please try again later.")
        products = []
    return view(request, "products", products=products)
