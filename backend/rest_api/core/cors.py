"""
CORS for the storefront and admin panel front-ends.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.constants import CRON_SECRET_HEADER, REQUEST_ID_HEADER, TENANT_HEADER
from shared.config.settings import settings


# Local dev servers (Next.js and Vite) when ALLOWED_ORIGINS is not set
DEV_ORIGINS = tuple(
    f"http://{host}:{port}"
    for host in ("localhost", "127.0.0.1")
    for port in (3000, 5173)
)

# The tenant header must be allowed or the storefront cannot pick a menu
REQUEST_HEADERS = [
    "Authorization",
    "Content-Type",
    "Accept",
    TENANT_HEADER,
    CRON_SECRET_HEADER,
    REQUEST_ID_HEADER,
]


def parse_origins(raw: str) -> list[str]:
    """"https://a.com, https://b.com/" -> ["https://a.com", "https://b.com"]"""
    return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]


def configure_cors(app: FastAPI) -> None:
    """Production must list its origins in ALLOWED_ORIGINS (enforced by settings)."""
    origins = parse_origins(settings.allowed_origins) or list(DEV_ORIGINS)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=REQUEST_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=0 if settings.environment == "development" else 600,
    )
