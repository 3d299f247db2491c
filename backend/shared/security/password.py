"""
Password hashing utilities using bcrypt.

Establishment owner passwords are always stored as bcrypt hashes.
"""

import secrets

import bcrypt

from shared.config.logging import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Returns:
        Hashed password string (includes salt and algorithm info), e.g. "$2b$12$...".
    """
    salt = bcrypt.gensalt(rounds=12)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its bcrypt hash.

    Non-bcrypt values (plaintext rows from old imports) never verify.
    """
    if not hashed_password or not hashed_password.startswith(("$2a$", "$2b$", "$2y$")):
        logger.warning("Rejected login against a non-bcrypt password hash")
        return False

    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def generate_password(length: int = 12) -> str:
    """Random initial password for establishments created by the order-sync webhook."""
    return secrets.token_urlsafe(length)[:length]
