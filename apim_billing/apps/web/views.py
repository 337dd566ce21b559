"""JSON view-models and redirects returned by the web frontend."""

from __future__ import annotations

from typing import Any

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse

from apim_billing.apps.web.session import get_selected_instance, get_user, pop_flash


def view(
    request: Request, name: str, *, status_code: int = status.HTTP_200_OK, **model: Any
) -> JSONResponse:
    """Render page ``name`` as a JSON document.

    Every page carries the signed-in user, the selected APIM instance and any
    flash messages queued by the previous request.
    """
    email, user_name = get_user(request.session)
    instance = get_selected_instance(request.session)
    payload = {
        "view": name,
        "user": {"email": email, "name": user_name} if email else None,
        "selectedInstance": instance.model_dump(by_alias=True) if instance else None,
        "messages": pop_flash(request.session),
        "model": model,
    }
    return JSONResponse(jsonable_encoder(payload, by_alias=True), status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


__all__ = ["redirect", "view"]
