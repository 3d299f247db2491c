"""
Rate limiting utilities using slowapi.
Protects public write endpoints (registration, customer orders, webhooks).

Usage:
    from shared.security.rate_limit import limiter

    @router.post("/register")
    @limiter.limit(settings.register_rate_limit)
    def register(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.settings import settings
from shared.config.logging import get_logger

logger = get_logger(__name__)


# Client IP is the rate limit key
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """
    Custom handler for rate limit exceeded errors.
    Returns a JSON response with retry information.
    """
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        ip_address=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Muitas requisições. Tente novamente mais tarde.",
            "retry_after": exc.detail,
        },
        headers={"Retry-After": str(exc.detail)},
    )
