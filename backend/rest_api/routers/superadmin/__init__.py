"""
Superadmin routers - /api/superadmin/*
Login is open; the console requires the superadmin token.
"""

from fastapi import APIRouter, Depends

from shared.config.constants import SUPERADMIN_PREFIX
from shared.security import require_superadmin
from .auth import router as auth_router
from .establishments import router as establishments_router
from .plans import router as plans_router

router = APIRouter(prefix=SUPERADMIN_PREFIX)

router.include_router(auth_router)
router.include_router(establishments_router, dependencies=[Depends(require_superadmin)])
router.include_router(plans_router, dependencies=[Depends(require_superadmin)])

__all__ = ["router"]
