"""
FastAPI application for the storefront, the owner panel and the platform console.

    uvicorn rest_api.main:app --port 3000
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from shared.config.settings import settings
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.public import health_router, router as public_router
from rest_api.routers.superadmin import router as superadmin_router
from rest_api.routers.tenant import router as tenant_router


API_VERSION = "0.1.0"


def create_app() -> FastAPI:
    application = FastAPI(
        title="MaisQueCardapio REST API",
        description="Multi-tenant digital menu, ordering and subscription API",
        version=API_VERSION,
        lifespan=lifespan,
    )

    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    configure_cors(application)
    register_middlewares(application)

    # Public storefront, owner panel (/api/e), platform console (/api/superadmin)
    for router in (health_router, public_router, tenant_router, superadmin_router):
        application.include_router(router)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rest_api.main:app", host="0.0.0.0", port=settings.rest_api_port, reload=settings.debug)
