"""
Seed data for development and testing.
Creates the commercial plans and, optionally, a ready-to-use demo establishment.
"""

from sqlalchemy.orm import Session
from sqlalchemy import select

from rest_api.models import (
    Category,
    Establishment,
    Neighborhood,
    Plan,
    Product,
    Setting,
    Table,
)
from shared.config.constants import DEFAULT_PRIMARY_COLOR, EstablishmentStatus, PlanCode
from shared.config.logging import get_logger
from shared.security.password import hash_password

logger = get_logger(__name__)


# =============================================================================
# Constants for seed data
# =============================================================================

PLANS = [
    {
        "code": PlanCode.FREE,
        "name": "Gratuito",
        "price": 0.0,
        "max_products": 10,
        "enable_ai": False,
        "enable_reservations": False,
        "enable_automation": False,
    },
    {
        "code": PlanCode.PREMIUM,
        "name": "Premium",
        "price": 49.90,
        "max_products": 100,
        "enable_ai": True,
        "enable_reservations": True,
        "enable_automation": True,
    },
]

DEMO_SLUG = "demo"
DEMO_NAME = "MaisQueCardapio Demo"
DEMO_PASSWORD = "admin123"
DEMO_TABLE_COUNT = 5

DEMO_SETTINGS = {
    "pix_key": "seu-pix@email.com",
    "whatsapp_kitchen": "5511999999999",
    "whatsapp_cashier": "5511999999999",
    "store_name": DEMO_NAME,
    "store_logo": "",
    "primary_color": DEFAULT_PRIMARY_COLOR,
    "is_open": "1",
    "enable_reservations": "1",
    "evolution_enabled": "0",
    "enable_ai": "1",
    "ai_provider": "gemini",
}


def seed_plans(db: Session) -> None:
    """
    Insert missing plans.
    Idempotent: plans are matched by code. Registration needs the free plan,
    so this runs even when demo data is disabled.
    """
    existing = set(db.execute(select(Plan.code)).scalars().all())
    missing = [p for p in PLANS if p["code"] not in existing]
    if not missing:
        logger.info("Plans already seeded, skipping")
        return

    for plan_data in missing:
        db.add(Plan(**plan_data))
    db.flush()
    logger.info("Plans seeded", codes=[p["code"] for p in missing])


def seed_demo(db: Session) -> None:
    """
    Create the demo establishment with settings, catalog, delivery zone and tables.
    Idempotent: skipped when the demo slug already exists.
    """
    if db.scalar(select(Establishment.id).where(Establishment.slug == DEMO_SLUG)):
        logger.info("Demo establishment already seeded, skipping")
        return

    premium = db.scalar(select(Plan).where(Plan.code == PlanCode.PREMIUM))

    establishment = Establishment(
        name=DEMO_NAME,
        slug=DEMO_SLUG,
        owner_email="admin@demo.com",
        password=hash_password(DEMO_PASSWORD),
        plan_id=premium.id,
        status=EstablishmentStatus.ACTIVE,
    )
    db.add(establishment)
    db.flush()

    for key, value in DEMO_SETTINGS.items():
        db.add(Setting(establishment_id=establishment.id, key=key, value=value))

    burgers = Category(establishment_id=establishment.id, name="Hambúrgueres")
    drinks = Category(establishment_id=establishment.id, name="Bebidas")
    db.add_all([burgers, drinks])
    db.flush()

    db.add(
        Product(
            establishment_id=establishment.id,
            category_id=burgers.id,
            name="X-Burger Clássico",
            description="Pão, carne 150g, queijo e maionese da casa.",
            price=25.90,
            image_url="https://picsum.photos/seed/burger1/400/300",
        )
    )
    db.add(Neighborhood(establishment_id=establishment.id, name="Centro", delivery_fee=5.00))

    for number in range(1, DEMO_TABLE_COUNT + 1):
        db.add(Table(establishment_id=establishment.id, number=number))

    logger.info("Demo establishment seeded", establishment_id=establishment.id, slug=DEMO_SLUG)


def seed(db: Session, demo: bool = True) -> None:
    """
    Seed the database with initial data.
    Idempotent: only inserts what doesn't exist.
    """
    seed_plans(db)
    if demo:
        seed_demo(db)
    db.commit()
