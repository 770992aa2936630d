"""Acting-user resolution.

Authentication itself happens upstream; requests arrive with the acting
user's id in the header named by ``APP_USER_HEADER`` (``X-User-Id``).
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Request

from taskboard.core.dependencies.database import SessionDep
from taskboard.core.exceptions import ForbiddenException, UnauthorizedException
from taskboard.core.settings import get_app_settings
from taskboard.features.users.models import User
from taskboard.infra.logging import set_log_context

logger = logging.getLogger(__name__)


async def get_current_user(request: Request, session: SessionDep) -> User:
    """Resolve the acting user from the identity header.

    Raises:
        UnauthorizedException: If the header is missing, malformed or names
            an unknown user.
    """
    header = get_app_settings().user_header
    raw = request.headers.get(header)
    if not raw:
        raise UnauthorizedException(detail=f"Missing {header} header")

    try:
        user_id = int(raw)
    except ValueError:
        raise UnauthorizedException(detail=f"Invalid {header} header") from None

    user = await session.get(User, user_id)
    if user is None:
        logger.info("Unknown user in identity header", extra={"user_id": user_id})
        raise UnauthorizedException(detail="Unknown user")

    request.state.user_id = user.id
    set_log_context(user_id=user.id)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUser) -> User:
    """Allow administrators only.

    Raises:
        ForbiddenException: If the acting user is not an administrator.
    """
    if not user.is_admin:
        raise ForbiddenException(
            detail="Administrator privileges required",
            extra={"user_id": user.id},
        )
    return user


AdminUser = Annotated[User, Depends(require_admin)]
