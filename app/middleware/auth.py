"""
Authentication middleware for JWT token verification
"""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from app.config import Settings, get_settings
from app.errors import AuthError, AuthorizationError
from app.models.user import Viewer
from app.services.user_store import UserStore, get_user_store
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, settings: Settings) -> str:
    """Issue a signed access token for ``user_id``"""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> str:
    """Return the user id carried by ``token``"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid or expired token")
    return user_id


def resolve_user(token: str, settings: Settings, users: UserStore) -> dict:
    user = users.get(decode_access_token(token, settings))
    if not user:
        raise AuthError("Invalid token")
    if user.get("is_active") is False:
        raise AuthError("Account is deactivated")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
) -> dict:
    """
    Verify JWT token and return current user
    """
    if not credentials or not credentials.credentials:
        raise AuthError("Missing token")
    return resolve_user(credentials.credentials, settings, users)


async def get_viewer(current_user: dict = Depends(get_current_user)) -> Viewer:
    return Viewer(current_user)


async def get_optional_viewer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
) -> Viewer:
    """
    Resolve the viewer if a valid token is provided, otherwise anonymous.
    Used for endpoints that work with or without authentication.
    """
    if not credentials or not credentials.credentials:
        return Viewer.anonymous()

    try:
        return Viewer(resolve_user(credentials.credentials, settings, users))
    except AuthError as e:
        logger.debug(f"Ignoring unusable token on optional-auth route: {e.message}")
        return Viewer.anonymous()


def require_roles(*roles: str):
    """Dependency factory rejecting viewers whose role is not in ``roles``"""

    async def check_role(viewer: Viewer = Depends(get_viewer)) -> Viewer:
        if viewer.role not in roles:
            raise AuthorizationError(f"Access denied. Required role: {' or '.join(roles)}")
        return viewer

    return check_role


require_lister = require_roles("landlord", "agent")
require_tenant = require_roles("tenant")
