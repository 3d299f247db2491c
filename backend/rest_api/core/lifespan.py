"""
Startup and shutdown of the REST API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from shared.infrastructure.db import engine, SessionLocal
from shared.config.settings import settings
from shared.config.logging import setup_logging, rest_api_logger as logger
from rest_api.models import Base
from rest_api.seed import seed
from rest_api.services.domain import migrate_all_legacy_settings


def check_configuration() -> None:
    """
    Refuse to start in production with default secrets; elsewhere only warn.
    """
    problems = settings.validate_production_secrets()
    for problem in problems:
        logger.error("Configuration error", error=problem)

    if problems and settings.environment == "production":
        raise RuntimeError("Insecure production configuration: " + "; ".join(problems))
    if problems:
        logger.warning("Running with insecure defaults", environment=settings.environment)


def init_database() -> None:
    """
    Idempotent: create missing tables, seed the plan catalogue (and the demo
    establishment when SEED_DEMO_DATA is on), rename legacy setting keys to
    their current names.
    """
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as db:
        seed(db, demo=settings.seed_demo_data)
        migrated = migrate_all_legacy_settings(db)

    logger.info("Database ready", migrated_settings=migrated, demo_data=settings.seed_demo_data)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    check_configuration()

    logger.info("Starting REST API", port=settings.rest_api_port, environment=settings.environment)
    init_database()

    yield

    logger.info("REST API stopped")
