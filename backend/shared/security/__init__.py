"""
Security module: Authentication, password hashing, rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    verify_jwt,
    get_bearer_token,
    sign_tenant_token,
    verify_tenant_token,
    check_superadmin_credentials,
    sign_superadmin_token,
    require_superadmin,
)
from shared.security.password import hash_password, verify_password, generate_password
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    # auth
    "sign_jwt",
    "verify_jwt",
    "get_bearer_token",
    "sign_tenant_token",
    "verify_tenant_token",
    "check_superadmin_credentials",
    "sign_superadmin_token",
    "require_superadmin",
    # password
    "hash_password",
    "verify_password",
    "generate_password",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
