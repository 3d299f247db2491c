"""
Structured logging for the backend.

Keyword arguments given to a log call become structured fields:

    logger.info("Order created", order_id=12, establishment_id=3)

Fields are rendered as JSON in production and as `key=value` pairs in
development. Records emitted inside a request also carry the request id and
the tenant slug (see shared.infrastructure.correlation).

Secrets and contact data never reach the output in clear text: fields named
like a secret are replaced, e-mail and phone fields are masked.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


SECRET_FIELDS = frozenset({"password", "api_key", "evolution_api_key", "ai_api_key", "token", "access_token", "secret"})
EMAIL_FIELDS = frozenset({"email", "owner_email"})
PHONE_FIELDS = frozenset({"phone", "owner_phone", "customer_phone", "number"})


def mask_email(email: str | None) -> str:
    """"user@example.com" -> "us***@example.com"."""
    if not email:
        return "<no-email>"
    local, sep, domain = email.partition("@")
    if not sep or not local:
        return "***@invalid"
    return f"{local[:2]}***@{domain}"


def mask_phone(phone: str | None) -> str:
    """Keep only the last four digits of a phone number."""
    if not phone:
        return "<no-phone>"
    digits = "".join(ch for ch in phone if ch.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-4:]}"


def redact_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Copy of `fields` with secrets removed and contact data masked."""
    redacted: dict[str, Any] = {}
    for key, value in fields.items():
        if key in SECRET_FIELDS and value:
            redacted[key] = "[redacted]"
        elif key in EMAIL_FIELDS and isinstance(value, str) and "***" not in value:
            redacted[key] = mask_email(value)
        elif key in PHONE_FIELDS and isinstance(value, str) and not value.startswith("***"):
            redacted[key] = mask_phone(value)
        else:
            redacted[key] = value
    return redacted


def _context(record: logging.LogRecord) -> dict[str, str]:
    context = {}
    for attr in ("request_id", "tenant"):
        value = getattr(record, attr, None)
        if value and value != "-":
            context[attr] = value
    return context


def _fields(record: logging.LogRecord) -> dict[str, Any]:
    fields = getattr(record, "fields", None)
    return redact_fields(fields) if fields else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log aggregation in production."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        fields = _fields(record)
        if fields:
            entry["data"] = fields
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if settings.debug:
            entry["source"] = f"{record.pathname}:{record.lineno}"
        return json.dumps(entry, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line output for local development."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        context = _context(record)
        tags = " ".join(
            part for part in (
                context.get("tenant"),
                context["request_id"][:8] if "request_id" in context else None,
            ) if part
        )
        prefix = f"{self.DIM}[{tags}]{self.RESET} " if tags else ""

        line = f"{color}{clock} {record.levelname:<8}{self.RESET} {prefix}{record.name}: {record.getMessage()}"
        fields = _fields(record)
        if fields:
            line += "  " + " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class StructuredLogger(logging.Logger):
    """
    Logger whose methods accept structured fields as keyword arguments.

    `exc_info` keeps its usual meaning; everything else is a field.
    """

    def log_fields(self, level: int, msg: str, *args: Any, exc_info: Any = None, **fields: Any) -> None:
        if self.isEnabledFor(level):
            self._log(level, msg, args, exc_info=exc_info, extra={"fields": fields or None})

    def debug(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.DEBUG, msg, *args, **fields)

    def info(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.INFO, msg, *args, **fields)

    def warning(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.WARNING, msg, *args, **fields)

    def error(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.ERROR, msg, *args, **fields)

    def critical(self, msg: str, *args: Any, **fields: Any) -> None:
        self.log_fields(logging.CRITICAL, msg, *args, **fields)


logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """Install the stdout handler on the root logger. Call once at startup."""
    from shared.infrastructure.correlation import RequestContextFilter

    level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    handler.setFormatter(JSONFormatter() if settings.environment == "production" else ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # Per-request access lines and gateway client chatter
    for noisy in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.error("Failed to send reminder", establishment_id=4, exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore[return-value]


rest_api_logger = get_logger("rest_api")
auth_logger = get_logger("rest_api.auth")
order_logger = get_logger("rest_api.orders")
notification_logger = get_logger("rest_api.notifications")
subscription_logger = get_logger("rest_api.subscriptions")
security_audit_logger = get_logger("security.audit")


def audit_auth_event(
    event_type: str,
    subject: int | str | None = None,
    email: str | None = None,
    success: bool = True,
    reason: str | None = None,
    ip_address: str | None = None,
    **extra: Any,
) -> None:
    """
    Record a login attempt (TENANT_LOGIN, SUPERADMIN_LOGIN) on the audit logger.

    Failures are logged at WARNING so they stand out.
    """
    security_audit_logger.log_fields(
        logging.INFO if success else logging.WARNING,
        f"AUTH_AUDIT: {event_type}",
        event_type=event_type,
        subject=subject,
        email=email,
        success=success,
        reason=reason,
        ip_address=ip_address,
        **extra,
    )
