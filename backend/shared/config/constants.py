"""
Centralized constants for the backend application.
Avoids magic strings for statuses, plan codes and settings keys.

Usage:
    from shared.config.constants import OrderType, EstablishmentStatus

    if order.type == OrderType.TABLE:
        ...
"""

from typing import Final


# =============================================================================
# Request scoping
# =============================================================================

TENANT_HEADER: Final[str] = "X-Establishment-Slug"
CRON_SECRET_HEADER: Final[str] = "X-Cron-Secret"
REQUEST_ID_HEADER: Final[str] = "X-Request-ID"

PUBLIC_PREFIX: Final[str] = "/api/public"
TENANT_PREFIX: Final[str] = "/api/e"
SUPERADMIN_PREFIX: Final[str] = "/api/superadmin"


# =============================================================================
# Token types
# =============================================================================


class TokenType:
    """JWT `type` claim values."""

    TENANT: Final[str] = "tenant"
    SUPERADMIN: Final[str] = "superadmin"


# =============================================================================
# Plans
# =============================================================================


class PlanCode:
    """Codes of the plans the subscription engine moves tenants between."""

    FREE: Final[str] = "free"
    PREMIUM: Final[str] = "premium"


# =============================================================================
# Entity Status Constants
# =============================================================================


class EstablishmentStatus:
    """Establishment (tenant) status constants."""

    ACTIVE: Final[str] = "active"
    SUSPENDED: Final[str] = "suspended"
    PENDING: Final[str] = "pending"

    ALL: Final[list[str]] = [ACTIVE, SUSPENDED, PENDING]


class TableStatus:
    """Physical table status constants."""

    AVAILABLE: Final[str] = "available"
    OCCUPIED: Final[str] = "occupied"
    RESERVED: Final[str] = "reserved"

    ALL: Final[list[str]] = [AVAILABLE, OCCUPIED, RESERVED]


class CommandStatus:
    """Open tab (command) status constants."""

    OPEN: Final[str] = "open"
    CLOSED: Final[str] = "closed"

    ALL: Final[list[str]] = [OPEN, CLOSED]


class OrderType:
    """Where an order was placed from."""

    TABLE: Final[str] = "table"
    DELIVERY: Final[str] = "delivery"

    ALL: Final[list[str]] = [TABLE, DELIVERY]


class OrderStatus:
    """Order status constants. Status is the only mutable order field."""

    PENDING: Final[str] = "pending"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, PREPARING, READY, DELIVERED, CANCELLED]


class ReservationStatus:
    """Reservation status constants."""

    PENDING: Final[str] = "pending"
    CONFIRMED: Final[str] = "confirmed"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, CANCELLED]


class SubscriptionStatus:
    """Subscription record status constants."""

    ACTIVE: Final[str] = "active"
    PAUSED: Final[str] = "paused"
    CANCELLED: Final[str] = "cancelled"
    PENDING: Final[str] = "pending"
    EXPIRED: Final[str] = "expired"

    ALL: Final[list[str]] = [ACTIVE, PAUSED, CANCELLED, PENDING, EXPIRED]


class PaymentStatus:
    """Payment gateway statuses that renew a subscription."""

    APPROVED: Final[str] = "approved"
    PAID: Final[str] = "paid"

    CONFIRMED: Final[frozenset[str]] = frozenset({APPROVED, PAID})


class ReminderType:
    """Reminder log types used for de-duplication."""

    EXPIRING_7D: Final[str] = "expiring_7d"
    EXPIRING_3D: Final[str] = "expiring_3d"
    EXPIRED: Final[str] = "expired"


class LifecycleState:
    """Derived subscription lifecycle state reported to tenants."""

    FREE: Final[str] = "free"
    PREMIUM_ACTIVE: Final[str] = "premium-active"
    PREMIUM_EXPIRING_7D: Final[str] = "premium-expiring-7d"
    PREMIUM_EXPIRING_3D: Final[str] = "premium-expiring-3d"
    PREMIUM_EXPIRED: Final[str] = "premium-expired"


# =============================================================================
# Subscription engine timing
# =============================================================================


class ReminderPolicy:
    """Days-before-expiry triggers and their de-duplication windows."""

    FIRST_NOTICE_DAYS: Final[int] = 7
    FIRST_NOTICE_DEDUP_DAYS: Final[int] = 3
    URGENT_NOTICE_DAYS: Final[int] = 3
    URGENT_NOTICE_DEDUP_DAYS: Final[int] = 2


# =============================================================================
# Settings keys
# =============================================================================


class SettingKeys:
    """Well-known keys of the per-establishment settings store."""

    STORE_NAME: Final[str] = "store_name"
    STORE_LOGO: Final[str] = "store_logo"
    PRIMARY_COLOR: Final[str] = "primary_color"
    THEME: Final[str] = "theme"
    PIX_KEY: Final[str] = "pix_key"
    WHATSAPP_KITCHEN: Final[str] = "whatsapp_kitchen"
    WHATSAPP_CASHIER: Final[str] = "whatsapp_cashier"
    IS_OPEN: Final[str] = "is_open"
    ENABLE_RESERVATIONS: Final[str] = "enable_reservations"
    EVOLUTION_ENABLED: Final[str] = "evolution_enabled"
    EVOLUTION_API_URL: Final[str] = "evolution_api_url"
    EVOLUTION_API_KEY: Final[str] = "evolution_api_key"
    EVOLUTION_INSTANCE: Final[str] = "evolution_instance"
    ENABLE_AI: Final[str] = "enable_ai"
    AI_PROVIDER: Final[str] = "ai_provider"
    AI_API_KEY: Final[str] = "ai_api_key"

    # Never returned by the public settings endpoint
    SECRET: Final[frozenset[str]] = frozenset({
        EVOLUTION_API_URL,
        EVOLUTION_API_KEY,
        EVOLUTION_INSTANCE,
        AI_API_KEY,
    })


# Legacy key -> current key, applied by the settings migration step
LEGACY_SETTING_KEYS: Final[dict[str, str]] = {
    "automation_enabled": SettingKeys.EVOLUTION_ENABLED,
    "logo_url": SettingKeys.STORE_LOGO,
    "brand_color": SettingKeys.PRIMARY_COLOR,
    "kitchen_whatsapp": SettingKeys.WHATSAPP_KITCHEN,
    "cashier_whatsapp": SettingKeys.WHATSAPP_CASHIER,
}

DEFAULT_PRIMARY_COLOR: Final[str] = "#f97316"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_SLUG_LENGTH: Final[int] = 60
    MAX_ITEMS_TEXT_LENGTH: Final[int] = 5000
    MAX_PRICE: Final[float] = 100_000.0

    # Orders list is capped for the admin panel
    ORDERS_LIST_LIMIT: Final[int] = 50

    MAX_SUBSCRIPTION_MONTHS: Final[int] = 24
    TABLES_CREATED_ON_SYNC: Final[int] = 5
