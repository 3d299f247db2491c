"""
Utilities module: Exceptions, validators, dates.
"""

from shared.utils.exceptions import (
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    UnauthorizedError,
)
from shared.utils.validators import (
    slugify,
    validate_slug,
    normalize_phone,
    validate_image_url,
)
from shared.utils.dates import add_months, utcnow

__all__ = [
    # exceptions
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "UnauthorizedError",
    # validators
    "slugify",
    "validate_slug",
    "normalize_phone",
    "validate_image_url",
    # dates
    "add_months",
    "utcnow",
]
