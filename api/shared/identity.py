"""Caller identity: owner id from a header or cookie.

The id is not verified. A caller sending neither gets a fresh random id
in a long-lived HTTP-only cookie.
"""
import uuid

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request, Response

from core.settings import IdentitySettings
from di.container import ApplicationContainer

logger = structlog.get_logger("bloom.identity")


@inject
async def resolve_owner(
    request: Request,
    response: Response,
    identity: IdentitySettings = Depends(
        Provide[ApplicationContainer.infrastructure.identity_settings]
    ),
) -> str:
    """Return the caller's owner id, issuing a cookie when none was sent."""
    user_id = request.headers.get(identity.USER_ID_HEADER) or request.cookies.get(
        identity.USER_ID_COOKIE
    )
    if user_id:
        return user_id

    user_id = str(uuid.uuid4())
    response.set_cookie(
        key=identity.USER_ID_COOKIE,
        value=user_id,
        max_age=identity.USER_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60,
        path="/",
        httponly=True,
        secure=identity.USER_COOKIE_SECURE,
        samesite="strict",
    )
    logger.info("user_id_issued", user_id=user_id)
    return user_id
