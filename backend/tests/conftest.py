"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["TENANT_AUTH_REQUIRED"] = "true"
os.environ["WEBHOOK_API_KEY"] = "test-webhook-key"
os.environ["PLATFORM_EVOLUTION_API_URL"] = ""
os.environ["OPERATOR_WHATSAPP"] = ""

from datetime import date, datetime, timezone

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, Establishment, Plan
from rest_api.seed import seed_plans
from rest_api.services.domain import EstablishmentService
from rest_api.services.notifications import (
    NotificationDispatcher,
    WhatsAppGateway,
    get_notification_dispatcher,
)
from shared.config.constants import EstablishmentStatus, TENANT_HEADER
from shared.infrastructure.db import get_db
from shared.security.password import hash_password
from shared.utils.schemas import RegisterRequest


WEBHOOK_API_KEY = "test-webhook-key"
TENANT_PASSWORD = "segredo123"

# SQLite in-memory database for testing
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh database per test with the commercial plans seeded.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    seed_plans(session)
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class GatewayRecorder:
    """Stands in for the WhatsApp gateway at the HTTP transport level."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.fail_with: Exception | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        return httpx.Response(self.status_code, json={"key": {"id": "msg-1"}})


@pytest.fixture
def gateway():
    return GatewayRecorder()


@pytest.fixture
def dispatcher(gateway):
    return NotificationDispatcher(
        gateway=WhatsAppGateway(timeout=1.0, transport=httpx.MockTransport(gateway.handler))
    )


@pytest.fixture(scope="function")
def client(db_session, dispatcher):
    """
    Create a test client with database session and dispatcher overrides.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def plan_by_code(db_session, code: str) -> Plan:
    return db_session.scalar(select(Plan).where(Plan.code == code))


@pytest.fixture
def plans(db_session) -> dict[str, Plan]:
    """Seeded plans by code."""
    return {code: plan_by_code(db_session, code) for code in ("free", "premium")}


@pytest.fixture
def make_establishment(db_session):
    """
    Factory for establishments inserted directly in the database.

    Usage:
        est = make_establishment("joe-burger", plan_code="premium", paid_until=date(...))
    """
    def _make(
        slug: str,
        *,
        plan_code: str = "free",
        paid_until: date | None = None,
        owner_email: str | None = None,
        owner_phone: str | None = "5511988887777",
        status: str = EstablishmentStatus.ACTIVE,
    ) -> Establishment:
        establishment = Establishment(
            name=slug.replace("-", " ").title(),
            slug=slug,
            owner_email=owner_email or f"owner@{slug}.com",
            owner_phone=owner_phone,
            password=hash_password(TENANT_PASSWORD),
            plan_id=plan_by_code(db_session, plan_code).id,
            status=status,
            paid_until=paid_until,
        )
        db_session.add(establishment)
        db_session.commit()
        db_session.refresh(establishment)
        return establishment

    return _make


@pytest.fixture
def tenant(db_session):
    """Joe's Burger, registered through the service on the free plan."""
    return EstablishmentService(db_session).register(
        RegisterRequest(
            name="Joe's Burger",
            slug="joe-burger",
            owner_email="joe@burger.com",
            owner_phone="5511977776666",
            password=TENANT_PASSWORD,
        )
    )


@pytest.fixture
def login(client):
    """Slug header plus the admin bearer token for a given establishment."""
    def _login(slug: str, password: str = TENANT_PASSWORD) -> dict[str, str]:
        response = client.post("/api/public/login", json={"slug": slug, "password": password})
        assert response.status_code == 200, f"Login failed: {response.json()}"
        token = response.json()["access_token"]
        return {TENANT_HEADER: slug, "Authorization": f"Bearer {token}"}

    return _login


@pytest.fixture
def admin_headers(login, tenant):
    """Admin headers for Joe's Burger."""
    return login(tenant.slug)


@pytest.fixture
def customer_headers(tenant):
    """Slug header only, as sent by the public menu."""
    return {TENANT_HEADER: tenant.slug}


@pytest.fixture
def superadmin_headers(client):
    response = client.post(
        "/api/superadmin/login",
        json={"username": "superadmin", "password": "changeme"},
    )
    assert response.status_code == 200, f"Login failed: {response.json()}"
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


class FixedClock:
    """Injectable clock for the subscription engine."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_date(self, day: date) -> None:
        self.now = datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))
