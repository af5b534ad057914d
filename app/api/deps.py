from dataclasses import dataclass
from typing import Annotated

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.error_codes import ErrorCode
from app.core.errors import ApiError
from app.core.security import decode_access_token
from app.services.payments import PaymentService, get_payment_service
from app.services.video import VideoAssetService, get_video_service

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    email: str | None = None


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthenticatedUser:
    if credentials is None:
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Missing authorization token")

    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Invalid or expired token") from exc

    user_id = payload.get("sub")
    if not user_id:
        raise ApiError(ErrorCode.UNAUTHENTICATED, "Invalid token")
    return AuthenticatedUser(user_id=str(user_id), email=payload.get("email"))


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
VideoService = Annotated[VideoAssetService, Depends(get_video_service)]
Payments = Annotated[PaymentService, Depends(get_payment_service)]
