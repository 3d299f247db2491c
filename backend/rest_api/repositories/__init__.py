"""
Repository Pattern implementation.
Centralizes data access; tenant-scoped queries always filter by establishment_id.

Usage:
    from rest_api.repositories import OrderRepository, TenantRepository

    repo = TenantRepository(Product, db)
    products = repo.find_all(establishment_id=1)
    orders = OrderRepository(db).list_recent(establishment_id=1)
"""

from .base import TenantRepository
from .order import CommandRepository, OrderRepository, ReservationRepository
from .settings import SettingRepository
from .establishment import EstablishmentRepository, PlanRepository

__all__ = [
    # Base
    "TenantRepository",
    # Orders
    "CommandRepository",
    "OrderRepository",
    "ReservationRepository",
    # Settings
    "SettingRepository",
    # Establishments
    "EstablishmentRepository",
    "PlanRepository",
]
