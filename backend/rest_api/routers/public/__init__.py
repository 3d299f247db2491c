"""
Public routers - No tenant header or authentication required.
- /api/public/* - Registration, lookup, owner login, webhooks, cron
- /api/health - Health check
"""

from fastapi import APIRouter

from shared.config.constants import PUBLIC_PREFIX
from .establishments import router as establishments_router
from .health import router as health_router
from .webhooks import router as webhooks_router

router = APIRouter(prefix=PUBLIC_PREFIX)
router.include_router(establishments_router)
router.include_router(webhooks_router)

__all__ = ["router", "health_router"]
