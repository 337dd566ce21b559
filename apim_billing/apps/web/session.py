"""Session keys, the signed-in user, the selected APIM instance and flash messages."""

from __future__ import annotations

from typing import Any, MutableMapping

from apim_billing.core.models import ApimInstance

Session = MutableMapping[str, Any]


class SessionKeys:  # pylint: disable=too-few-public-methods
    """Keys used to store web state in the signed session cookie."""

    USER_EMAIL = "UserEmail"
    USER_NAME = "UserName"
    APIM_SERVICE_NAME = "ApimServiceName"
    APIM_RESOURCE_GROUP = "ApimResourceGroup"
    FLASH = "Flash"


def get_user(session: Session) -> tuple[str | None, str | None]:
    """Return the signed-in user's email and name."""
    return session.get(SessionKeys.USER_EMAIL) or None, session.get(SessionKeys.USER_NAME) or None


def set_user(session: Session, email: str, name: str) -> None:
    session[SessionKeys.USER_EMAIL] = email
    session[SessionKeys.USER_NAME] = name


def get_selected_instance(session: Session) -> ApimInstance | None:
    """Return the APIM instance chosen in this session, if both parts are set."""
    service_name = session.get(SessionKeys.APIM_SERVICE_NAME)
    resource_group = session.get(SessionKeys.APIM_RESOURCE_GROUP)
    if not service_name or not resource_group:
        return None
    return ApimInstance(service_name=service_name, resource_group=resource_group)


def select_instance(session: Session, instance: ApimInstance) -> None:
    session[SessionKeys.APIM_SERVICE_NAME] = instance.service_name
    session[SessionKeys.APIM_RESOURCE_GROUP] = instance.resource_group


def flash(session: Session, level: str, message: str) -> None:
    """Queue a one-shot message for the next rendered view."""
    messages = dict(session.get(SessionKeys.FLASH) or {})
    messages[level] = message
    session[SessionKeys.FLASH] = messages


def pop_flash(session: Session) -> dict[str, str]:
    return dict(session.pop(SessionKeys.FLASH, None) or {})


__all__ = [
    "SessionKeys",
    "flash",
    "get_selected_instance",
    "get_user",
    "pop_flash",
    "select_instance",
    "set_user",
]
