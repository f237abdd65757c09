"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from casa.auth.jwt import ACCESS, decode_token
from casa.database import get_db
from casa.models.user import UserProfile

# Rejects requests that carry no bearer token at all
_bearer_scheme = HTTPBearer()


async def _user_from_token(token: str, db: AsyncSession) -> UserProfile | None:
    """Resolve an access token to an active profile, or ``None``."""
    try:
        payload = decode_token(token, expected_type=ACCESS)
        user_id = uuid.UUID(str(payload.get("sub")))
    except (JWTError, ValueError):
        return None

    user = await db.get(UserProfile, user_id)
    if user is None or not user.is_active:
        return None
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """Extract and validate the Bearer token, then return the authenticated profile.

    Raises:
        HTTPException 401: If the token is invalid, expired, of the wrong type,
            or the profile is missing or deactivated.
    """
    user = await _user_from_token(credentials.credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_admin(
    user: UserProfile = Depends(get_current_user),
) -> UserProfile:
    """Return the current user only if they hold the admin role.

    Raises:
        HTTPException 403: If the user is not an admin.
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
