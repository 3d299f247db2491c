"""
Services module for business logic.

- domain/: Application services (business logic) - USE THESE
- notifications/: WhatsApp gateway client and best-effort dispatcher
- base_service: Tenant-scoped CRUD base class

Usage:
    from rest_api.services.domain import CategoryService
    service = CategoryService(db)
    categories = service.list_all(establishment_id)
"""

# Domain Services
from .domain import (
    CategoryService,
    ProductService,
    NeighborhoodService,
    TableService,
    CommandService,
    OrderService,
    ReservationService,
    SettingsService,
    EstablishmentService,
    PlanService,
    SubscriptionService,
)

# Notifications
from .notifications import NotificationDispatcher, get_notification_dispatcher

# Base service classes for creating new domain services
from .base_service import TenantCRUDService

__all__ = [
    # Domain Services
    "CategoryService",
    "ProductService",
    "NeighborhoodService",
    "TableService",
    "CommandService",
    "OrderService",
    "ReservationService",
    "SettingsService",
    "EstablishmentService",
    "PlanService",
    "SubscriptionService",
    # Notifications
    "NotificationDispatcher",
    "get_notification_dispatcher",
    # Base service classes
    "TenantCRUDService",
]
