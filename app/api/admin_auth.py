from typing import Annotated

from fastapi import Depends

from app.api.deps import AuthenticatedUser, CurrentUser
from app.core.config import Settings, get_settings
from app.core.error_codes import ErrorCode
from app.core.errors import ApiError


def require_admin(
    current_user: CurrentUser,
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthenticatedUser:
    if not settings.admin_user_id:
        raise ApiError(ErrorCode.UNAUTHORIZED, "Admin endpoints are disabled")
    if current_user.user_id != settings.admin_user_id:
        raise ApiError(ErrorCode.UNAUTHORIZED)
    return current_user
