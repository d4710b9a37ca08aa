"""
HTTP middleware: request tracing, security headers, body size limit
"""
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from app.core.logging_config import logger, set_request_id, set_user_id, generate_request_id

# Probes and docs are too chatty to log
QUIET_PATHS = frozenset({
    "/", "/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json", "/api/v1/health/live",
})
SLOW_REQUEST_MS = 1000

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id (the caller's X-Request-ID if sent),
    time it and log the outcome. Echoes X-Request-ID and X-Response-Time.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        method, path = request.method, request.url.path
        started = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.log_error_with_context(exc, context=f"{method} {path}")
                raise

            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"

            if path not in QUIET_PATHS:
                client_ip = request.client.host if request.client else "unknown"
                logger.log_request(method, path, response.status_code, elapsed_ms, client_ip=client_ip)
                if elapsed_ms > SLOW_REQUEST_MS:
                    logger.warning(f"Slow request: {method} {path} took {elapsed_ms:.0f}ms")

            return response
        finally:
            set_request_id("")
            set_user_id("")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose Content-Length exceeds ``max_size`` with a 413"""

    def __init__(self, app: ASGIApp, max_size: int = 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_size:
            logger.warning(f"Rejected {declared} byte body on {request.url.path} (max {self.max_size})")
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "error": {
                        "code": "REQUEST_TOO_LARGE",
                        "message": f"Request body exceeds {self.max_size} bytes",
                        "details": {"max_size": self.max_size},
                    },
                },
            )
        return await call_next(request)
