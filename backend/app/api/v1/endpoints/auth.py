"""
Operator sign-in

POST /auth/login exchanges email and password for a bearer token,
GET /auth/me echoes the operator behind the token.
"""
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import auth_rate_limit
from app.core.security import verify_password, create_access_token
from app.models.user import User
from app.modules.auth.dependencies import get_current_user
from app.schemas.auth import UserLogin, LoginResponse, UserResponse

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _reject_login(email: str, reason: str, client_ip: str) -> None:
    logger.log_auth_event(
        event="login",
        success=False,
        user_email=email,
        reason=reason,
        client_ip=client_ip
    )


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    client_ip = request.client.host if request.client else "unknown"
    email = credentials.email.lower()

    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()

    # Unknown email and wrong password look the same to the caller
    if user is None or not verify_password(credentials.password, user.hashed_password):
        _reject_login(email, "Invalid credentials", client_ip)
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        _reject_login(email, "Account inactive", client_ip)
        raise AuthorizationError("Account is inactive")

    user.last_login = datetime.utcnow()
    await db.commit()
    set_user_id(user.id)

    token = create_access_token(user.id, {"email": user.email, "role": user.role.value})
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return LoginResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def read_current_operator(current_user: User = Depends(get_current_user)):
    return current_user
