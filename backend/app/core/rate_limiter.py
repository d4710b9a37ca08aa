"""
Request throttling with slowapi

Every route gets RATE_LIMIT_PER_MINUTE per caller; /auth/login gets the
tighter LOGIN_RATE_LIMIT per client address. Counters live in
RATE_LIMIT_STORAGE_URI (in-process memory unless pointed at Redis).
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.logging_config import logger

RETRY_AFTER_SECONDS = 60


def rate_limit_key(request: Request) -> str:
    """Authenticated operator if known, otherwise the client address"""
    user_id = getattr(request.state, "user_id", None)
    return f"user:{user_id}" if user_id else f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"[RateLimit] {rate_limit_key(request)} hit {exc.detail} on {request.url.path}")
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": {
                "code": "RATE_LIMITED",
                "message": "Too many requests",
                "details": {"limit": str(exc.detail)},
            },
        },
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


def auth_rate_limit():
    # Login callers are anonymous, so key on address only
    return limiter.limit(settings.LOGIN_RATE_LIMIT, key_func=get_remote_address)
