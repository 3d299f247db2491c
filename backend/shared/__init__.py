"""
Shared module for common utilities used by the REST API and the CLI.

STRUCTURE:
- shared.security: Authentication, password hashing, rate limiting
  - auth.py: JWT signing/verification, tenant and superadmin tokens
  - password.py: Bcrypt hashing, generated passwords
  - rate_limit.py: slowapi limiter for public write endpoints

- shared.infrastructure: Database and request correlation
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: request id and tenant slug log context

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Statuses, plan codes, setting keys, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Slugs, phones, SSRF-safe image URLs
  - schemas.py: Pydantic request/response schemas
  - dates.py: UTC clock and calendar month arithmetic
  - health.py: Health check helpers

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, require_superadmin
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, PlanCode
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.validators import validate_image_url
"""
