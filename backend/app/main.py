"""
School Admin API entry point

Run locally with ``uvicorn app.main:app --reload`` from ``backend/``.
"""
from contextlib import asynccontextmanager
from typing import List, Tuple

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import select, func

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.database import close_db, get_session_local, init_db
from app.core.exceptions import SchoolAdminError, error_response
from app.core.logging_config import logger
from app.core.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    RequestSizeLimitMiddleware,
)
from app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from app.core.security import get_password_hash
from app.models.user import User, UserRole
from app.services.cache_service import cache_service
import app.models  # noqa: F401  (register models on Base.metadata)

APP_VERSION = "1.0.0"
PLACEHOLDER_SECRETS = {"", "CHANGE_ME"}


def config_problems() -> Tuple[List[str], List[str]]:
    """(fatal, advisory) configuration problems"""
    fatal, advisory = [], []

    if not settings.DATABASE_URL:
        fatal.append("DATABASE_URL is not set")
    for name in ("SECRET_KEY", "JWT_SECRET_KEY"):
        if getattr(settings, name) in PLACEHOLDER_SECRETS:
            fatal.append(f"{name} is not set or still the placeholder")
    if settings.CACHE_ENABLED and not settings.REDIS_URL:
        fatal.append("CACHE_ENABLED is on but REDIS_URL is not set")

    if settings.is_production and settings.DEBUG:
        advisory.append("DEBUG is on in production, error bodies will include exception text")
    if settings.is_production and not settings.RATE_LIMIT_ENABLED:
        advisory.append("Rate limiting is off in production")

    return fatal, advisory


async def bootstrap_admin() -> None:
    """Create the first admin when the users table is empty"""
    if not (settings.BOOTSTRAP_ADMIN_EMAIL and settings.BOOTSTRAP_ADMIN_PASSWORD):
        return

    async with get_session_local()() as session:
        if await session.scalar(select(func.count(User.id))):
            return
        session.add(User(
            email=settings.BOOTSTRAP_ADMIN_EMAIL.lower(),
            full_name="Administrator",
            hashed_password=get_password_hash(settings.BOOTSTRAP_ADMIN_PASSWORD),
            role=UserRole.ADMIN,
        ))
        await session.commit()
    logger.info(f"[Startup] Created bootstrap admin {settings.BOOTSTRAP_ADMIN_EMAIL}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} {APP_VERSION} ({settings.ENVIRONMENT})")

    fatal, advisory = config_problems()
    for problem in advisory:
        logger.warning(f"[Startup] {problem}")
    if fatal:
        for problem in fatal:
            logger.critical(f"[Startup] {problem}")
        raise RuntimeError(f"Refusing to start: {'; '.join(fatal)}")

    try:
        await init_db()
        await bootstrap_admin()
        logger.info("[Startup] Database ready")
    except Exception as e:
        # Readiness probe keeps reporting 503 until the database comes up
        logger.error(f"[Startup] Database not ready: {e}")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await cache_service.close()
    await close_db()


app = FastAPI(
    title=settings.APP_NAME,
    description="School administration backend: students, boarding, transport and inventory",
    version=APP_VERSION,
    lifespan=lifespan,
    redirect_slashes=False
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Last added runs first: CORS, size limit, security headers, logging, rate limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Response-Time"],
)


@app.exception_handler(SchoolAdminError)
async def handle_domain_error(request: Request, exc: SchoolAdminError):
    if exc.status_code >= 500:
        logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.log_error_with_context(exc, context=f"{request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": str(exc) if settings.DEBUG else "An unexpected error occurred",
                "details": {},
            },
        },
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get("/", tags=["Root"])
async def root():
    return {"name": settings.APP_NAME, "version": APP_VERSION, "docs": "/docs", "health": "/health"}


app.include_router(api_router, prefix=f"/api/{settings.API_VERSION}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT, reload=settings.DEBUG)
