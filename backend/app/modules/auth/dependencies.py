"""
FastAPI dependencies resolving the operator behind a bearer token
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import set_user_id
from app.core.security import decode_access_token
from app.models.user import User, UserRole

# Missing credentials are reported by get_current_user as a 401
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Operator for the request's bearer token. Inactive accounts get a 403."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)

    user = await db.get(User, payload["sub"])
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    # Rate limiter and log records key on the authenticated user
    request.state.user_id = user.id
    set_user_id(user.id)
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return current_user
