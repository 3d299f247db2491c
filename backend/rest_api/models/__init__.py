"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and TimestampMixin
- tenant: Plan, Establishment
- catalog: Category, Product, Neighborhood
- table: Table, Command
- order: Order, Reservation
- settings: Setting
- billing: Subscription, ReminderSent
"""

# Base classes
from .base import Base, TimestampMixin

# Core tenant models
from .tenant import Plan, Establishment

# Catalog (menu structure and delivery zones)
from .catalog import Category, Product, Neighborhood

# Dine-in
from .table import Table, Command

# Orders and bookings
from .order import Order, Reservation

# Per-establishment configuration
from .settings import Setting

# Billing
from .billing import Subscription, ReminderSent

__all__ = [
    "Base",
    "TimestampMixin",
    "Plan",
    "Establishment",
    "Category",
    "Product",
    "Neighborhood",
    "Table",
    "Command",
    "Order",
    "Reservation",
    "Setting",
    "Subscription",
    "ReminderSent",
]
