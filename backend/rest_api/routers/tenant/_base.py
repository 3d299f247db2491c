"""
Shared dependencies and helpers for tenant-scoped (/api/e) routers.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.config.settings import settings
from rest_api.models import Establishment
from rest_api.core.tenancy import current_establishment, require_tenant_admin
from rest_api.services.notifications import NotificationDispatcher, get_notification_dispatcher
from shared.utils.schemas import CreatedResponse, SuccessResponse

__all__ = [
    "APIRouter",
    "BackgroundTasks",
    "Depends",
    "Request",
    "status",
    "Session",
    "get_db",
    "limiter",
    "settings",
    "Establishment",
    "current_establishment",
    "require_tenant_admin",
    "NotificationDispatcher",
    "get_notification_dispatcher",
    "CreatedResponse",
    "SuccessResponse",
]
