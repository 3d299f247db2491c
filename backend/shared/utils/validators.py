"""
Shared validators for input sanitization.
Slugs, phone numbers and image URLs supplied by tenants.
"""

import re
import unicodedata
from typing import Optional
from urllib.parse import urlparse

from shared.config.constants import Limits


# Internal hosts that must never appear in tenant-supplied URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",  # Link-local, cloud metadata
    "[::1]",
    "metadata.google",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(value: str) -> str:
    """
    Turn a store name into a URL slug.

    "Joe's Burger & Grill" -> "joe-s-burger-grill"
    "Açaí da Praça" -> "acai-da-praca"
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_only.lower()).strip("-")
    return slug[:Limits.MAX_SLUG_LENGTH].rstrip("-")


def validate_slug(slug: str) -> str:
    """
    Validate a slug chosen at registration.

    Raises:
        ValueError: If the slug is empty, too long or has invalid characters.
    """
    slug = slug.strip().lower()
    if not slug:
        raise ValueError("Slug obrigatório")
    if len(slug) > Limits.MAX_SLUG_LENGTH:
        raise ValueError(f"Slug deve ter no máximo {Limits.MAX_SLUG_LENGTH} caracteres")
    if not SLUG_PATTERN.match(slug):
        raise ValueError("Slug deve conter apenas letras minúsculas, números e hífens")
    return slug


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Keep only digits of a WhatsApp number ("+55 (11) 99999-9999" -> "5511999999999")."""
    if phone is None:
        return None
    digits = re.sub(r"\D", "", phone)
    return digits or None


def validate_image_url(url: Optional[str]) -> Optional[str]:
    """
    Validate and sanitize an image URL.

    Returns:
        The validated URL or None if empty

    Raises:
        ValueError: If the URL is invalid or points to an internal host
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    parsed = urlparse(url)

    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES:
        raise ValueError(f"Esquema de URL não permitido: {scheme}")

    if scheme not in ("http", "https"):
        raise ValueError("Apenas URLs HTTP/HTTPS são permitidas")

    host = parsed.netloc.lower()
    if not host:
        raise ValueError("URL sem host válido")

    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked):
            raise ValueError("URL interna não permitida")

    return url
