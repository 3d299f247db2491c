"""
Liveness and readiness endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.utils.health import DEGRADED, HEALTHY, run_checks
from rest_api.services.notifications import NotificationDispatcher, get_notification_dispatcher


router = APIRouter(prefix="/api", tags=["health"])

SERVICE_NAME = "rest-api"


@router.get("/health")
def health_check():
    """Liveness only; touches no dependency."""
    return {"status": HEALTHY, "service": SERVICE_NAME, "environment": settings.environment}


def check_database() -> dict:
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
        return {"type": db.get_bind().dialect.name}


@router.get("/health/detailed")
async def detailed_health_check(
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """
    Database connectivity plus WhatsApp dispatch counters and recent outcomes.

    503 when the database is unreachable. A failing gateway does not make
    the service unhealthy; it shows up in the notification counters.
    """
    healthy, components = await run_checks({"database": check_database})

    body = {
        "status": HEALTHY if healthy else DEGRADED,
        "service": SERVICE_NAME,
        "environment": settings.environment,
        "dependencies": components,
        "notifications": dispatcher.stats(),
    }
    return body if healthy else JSONResponse(content=body, status_code=503)
