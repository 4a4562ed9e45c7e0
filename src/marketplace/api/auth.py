"""Bearer-token authentication.

Tokens are issued elsewhere; this service only verifies them. The payload
carries the user id as `userId` (or the standard `sub`) and a `role`.
"""

import os
from dataclasses import dataclass

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from marketplace.errors import AuthenticationError, ForbiddenError

logger = structlog.get_logger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-key-change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

ROLE_USER = "USER"
ROLE_VENDOR = "VENDOR"
ROLE_ADMIN = "ADMIN"

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: str = ROLE_USER
    email: str | None = None


def decode_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected bearer token", reason=str(exc))
        raise AuthenticationError("Invalid or expired token") from None

    user_id = payload.get("userId") or payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    return CurrentUser(
        user_id=str(user_id),
        role=str(payload.get("role") or ROLE_USER).upper(),
        email=payload.get("email"),
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    if credentials is None:
        raise AuthenticationError("Authentication required")
    return decode_token(credentials.credentials)


def require_role(*roles):
    """Dependency that admits only users holding one of `roles`."""

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in roles:
            raise ForbiddenError("Insufficient permissions")
        return user

    return dependency


require_vendor = require_role(ROLE_VENDOR, ROLE_ADMIN)
