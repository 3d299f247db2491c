"""
Infrastructure module: Database sessions and request correlation.

Provides:
- Database sessions and transactions (db.py)
- Request id and tenant slug for logs (correlation.py)
"""

from shared.infrastructure.db import (
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    safe_commit,
)
from shared.infrastructure.correlation import (
    RequestContextMiddleware,
    get_request_id,
    get_tenant_slug,
)

__all__ = [
    # db
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
    # correlation
    "RequestContextMiddleware",
    "get_request_id",
    "get_tenant_slug",
]
