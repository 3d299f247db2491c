"""
Domain Services - application layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import CategoryService

    # In router
    service = CategoryService(db)
    categories = service.list_all(establishment.id)
"""

from .category_service import CategoryService
from .product_service import ProductService
from .neighborhood_service import NeighborhoodService
from .table_service import TableService, CommandService
from .order_service import OrderService, plan_order_notification
from .reservation_service import ReservationService
from .settings_service import (
    EstablishmentConfig,
    SettingsService,
    coerce_setting_value,
    migrate_all_legacy_settings,
)
from .establishment_service import EstablishmentService, default_settings
from .plan_service import PlanService
from .subscription_service import SubscriptionService, SyncResult, lifecycle_state

__all__ = [
    "CategoryService",
    "ProductService",
    "NeighborhoodService",
    "TableService",
    "CommandService",
    "OrderService",
    "plan_order_notification",
    "ReservationService",
    "EstablishmentConfig",
    "SettingsService",
    "coerce_setting_value",
    "migrate_all_legacy_settings",
    "EstablishmentService",
    "default_settings",
    "PlanService",
    "SubscriptionService",
    "SyncResult",
    "lifecycle_state",
]
