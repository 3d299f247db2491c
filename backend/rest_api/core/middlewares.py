"""
HTTP middlewares: response hardening, JSON-only request bodies,
request logging and request context.
"""

import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from shared.config.logging import rest_api_logger as logger
from shared.config.settings import settings
from shared.infrastructure.correlation import RequestContextMiddleware


# The API only ever returns JSON, so nothing may be framed, sniffed or loaded
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}
HSTS_HEADER = "max-age=31536000; includeSubDomains"

UNSUPPORTED_MEDIA_TYPE = "Tipo de conteúdo não suportado. Use application/json"

# Paths polled by load balancers, kept out of the request log
QUIET_PATHS = frozenset({"/api/health"})


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Hardening headers on every response; HSTS in production only."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = HSTS_HEADER
        if "server" in response.headers:
            del response.headers["server"]
        return response


class JSONBodyMiddleware(BaseHTTPMiddleware):
    """
    Reject POST/PUT/PATCH bodies that are not JSON with 415.

    Requests without a Content-Type (no body) pass through; FastAPI reports
    a missing body as 422.
    """

    METHODS_WITH_BODY = frozenset({"POST", "PUT", "PATCH"})

    async def dispatch(self, request: Request, call_next):
        if request.method in self.METHODS_WITH_BODY:
            media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
            if media_type and media_type != "application/json":
                return JSONResponse(status_code=415, content={"detail": UNSUPPORTED_MEDIA_TYPE})
        return await call_next(request)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One log line per request with status and duration."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        if request.url.path not in QUIET_PATHS:
            duration_ms = round((time.perf_counter() - started) * 1000, 1)
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request handled",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Register the middlewares. The last one added runs first, so the request
    context is in place before anything logs.
    """
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(JSONBodyMiddleware)
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(RequestContextMiddleware)
