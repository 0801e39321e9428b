"""
Authentication Dependencies
JWT token handling and turning a bearer token into an Actor
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from app.auth.roles import Actor, Role
from app.config import settings
from app.errors import Forbidden, Unauthorized
from app.logging_config import set_user_id
from app.store import Collection

logger = logging.getLogger(__name__)

# Security scheme; missing credentials are handled below so optional-auth
# routes can see anonymous callers
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode (user_id, email, role)
        expires_delta: Token lifetime, JWT_EXPIRATION_HOURS by default

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Raises:
        Unauthorized: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Could not validate credentials")


async def _actor_from_token(request: Request, token: str) -> Actor:
    payload = decode_access_token(token)
    user_id = payload.get("user_id")
    if not user_id:
        raise Unauthorized("Invalid authentication credentials")

    # Role and active flag come from the stored user, not the token
    store = request.app.state.container.store
    user = await store.find_by_id(Collection.USERS, user_id)
    if user is None:
        raise Unauthorized("User no longer exists")
    if not user.get("is_active", True):
        raise Forbidden("Account is deactivated")

    actor = Actor(
        id=user["id"],
        role=Role(user["role"]),
        email=user.get("email", ""),
        name=f"{user.get('first_name', '')} {user.get('last_name', '')}".strip(),
    )
    set_user_id(actor.id)
    return actor


async def get_current_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Actor:
    """Authenticated caller; 401 when there is no usable token"""
    if credentials is None:
        raise Unauthorized("No token, authorization denied")
    return await _actor_from_token(request, credentials.credentials)


async def get_optional_actor(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Actor]:
    """Caller when a valid token is present, None for anonymous reads"""
    if credentials is None:
        return None
    try:
        return await _actor_from_token(request, credentials.credentials)
    except (Unauthorized, Forbidden) as e:
        logger.debug("Ignoring unusable token on optional-auth route: %s", e.message)
        return None


async def get_admin_actor(actor: Actor = Depends(get_current_actor)) -> Actor:
    """Require admin"""
    if not actor.is_admin:
        raise Forbidden("Access denied. Admin role required.")
    return actor
