"""
Tenant-scoped routers, mounted under /api/e.
Every route resolves the establishment from the X-Establishment-Slug header.
"""

from fastapi import APIRouter, Depends

from rest_api.core.tenancy import resolve_tenant
from shared.config.constants import TENANT_PREFIX
from .catalog import router as catalog_router
from .tables import router as tables_router
from .orders import router as orders_router
from .settings import router as settings_router
from .subscription import router as subscription_router

router = APIRouter(prefix=TENANT_PREFIX, dependencies=[Depends(resolve_tenant)])

router.include_router(catalog_router)
router.include_router(tables_router)
router.include_router(orders_router)
router.include_router(settings_router)
router.include_router(subscription_router)

__all__ = ["router"]
