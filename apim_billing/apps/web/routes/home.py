"""Landing page, sign-in and sign-out."""

from __future__ import annotations

from fastapi import APIRouter, Request

from apim_billing.apps.web.routes.forms import SetUserForm
from apim_billing.apps.web.session import flash, get_user, set_user
from apim_billing.apps.web.views import redirect, view

router = APIRouter(tags=["web"])


@router.get("/")
async def index(request: Request):
    email, _ = get_user(request.session)
    if email:
        return redirect("/products")
    return view(request, "home")


@router.post("/set-user")
async def set_current_user(request: Request, form: SetUserForm):
    email = form.email.strip()
    name = form.name.strip()
    if not email or not name:
        flash(request.session, "error", "Please provide both email and name.")
        return redirect("/")

    set_user(request.session, email, name)
    flash(request.session, "success", f"Welcome, {name}!")
    return redirect("/subscriptions/mine")


@router.post("/logout")
async def logout(request: Request):
    request.session.clear()
    return redirect("/")
