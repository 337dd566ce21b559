"""Product catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from apim_billing.apps.api.dependencies import BillingDependency, TargetDependency
from apim_billing.core.api_models import Product

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=list[Product])
async def get_products(billing: BillingDependency, target: TargetDependency) -> list[Product]:
    """Get all published API products from APIM."""
    return await billing.get_products(target)


__all__ = ["router"]
