"""
Tests for public endpoints: registration, slug lookup, owner login,
and tenant resolution on /api/e routes.
"""

from sqlalchemy import select

from rest_api.models import Establishment, Setting
from shared.config.constants import TENANT_HEADER
from shared.config.settings import settings


class TestRegistration:
    """POST /api/public/register"""

    def test_register_creates_free_establishment(self, client, db_session, plans):
        response = client.post(
            "/api/public/register",
            json={
                "name": "Joe's Burger",
                "slug": "joe-burger",
                "owner_email": "joe@burger.com",
                "password": "segredo123",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "joe-burger"

        establishment = db_session.get(Establishment, data["id"])
        assert establishment.plan_id == plans["free"].id
        assert establishment.status == "active"
        # Stored hashed, never in clear text
        assert establishment.password != "segredo123"
        assert establishment.password.startswith("$2")

    def test_register_writes_default_settings(self, client, db_session):
        response = client.post(
            "/api/public/register",
            json={
                "name": "Joe's Burger",
                "slug": "joe-burger",
                "owner_email": "joe@burger.com",
                "password": "segredo123",
            },
        )
        establishment_id = response.json()["id"]

        rows = db_session.execute(
            select(Setting.key, Setting.value).where(Setting.establishment_id == establishment_id)
        ).all()
        assert dict(rows) == {
            "store_name": "Joe's Burger",
            "is_open": "1",
            "primary_color": "#f97316",
        }

    def test_duplicate_slug_is_rejected(self, client, db_session, tenant):
        response = client.post(
            "/api/public/register",
            json={
                "name": "Outro Burger",
                "slug": "joe-burger",
                "owner_email": "other@burger.com",
                "password": "segredo123",
            },
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Slug já em uso ou dados inválidos"

        # The existing tenant is untouched
        db_session.expire_all()
        assert db_session.get(Establishment, tenant.id).owner_email == "joe@burger.com"

    def test_invalid_slug_is_rejected(self, client):
        response = client.post(
            "/api/public/register",
            json={
                "name": "Joe",
                "slug": "Joe Burger!",
                "owner_email": "joe@burger.com",
                "password": "segredo123",
            },
        )
        assert response.status_code == 422

    def test_missing_fields_are_rejected(self, client):
        response = client.post("/api/public/register", json={"name": "Joe"})
        assert response.status_code == 422


class TestEstablishmentLookup:
    """GET /api/public/establishments/{slug}"""

    def test_lookup_returns_public_fields_only(self, client, tenant):
        response = client.get("/api/public/establishments/joe-burger")

        assert response.status_code == 200
        assert response.json() == {
            "id": tenant.id,
            "name": "Joe's Burger",
            "slug": "joe-burger",
            "status": "active",
        }

    def test_unknown_slug_is_404(self, client):
        response = client.get("/api/public/establishments/nope")
        assert response.status_code == 404


class TestOwnerLogin:
    """POST /api/public/login"""

    def test_login_returns_bearer_token(self, client, tenant):
        response = client.post("/api/public/login", json={"slug": "joe-burger", "password": "segredo123"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == settings.tenant_token_expire_hours * 3600
        assert data["access_token"]

    def test_wrong_password_is_401(self, client, tenant):
        response = client.post("/api/public/login", json={"slug": "joe-burger", "password": "errada"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciais inválidas"

    def test_unknown_slug_gets_same_message(self, client):
        response = client.post("/api/public/login", json={"slug": "nope", "password": "x"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciais inválidas"

    def test_suspended_establishment_cannot_login(self, client, make_establishment):
        make_establishment("suspensa", status="suspended")
        response = client.post("/api/public/login", json={"slug": "suspensa", "password": "segredo123"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Estabelecimento suspenso"


class TestTenantResolution:
    """The X-Establishment-Slug header on /api/e routes."""

    def test_missing_header_is_400(self, client, tenant):
        response = client.get("/api/e/products")
        assert response.status_code == 400

    def test_blank_header_is_400(self, client, tenant):
        response = client.get("/api/e/products", headers={TENANT_HEADER: "  "})
        assert response.status_code == 400

    def test_unknown_slug_is_404(self, client, tenant):
        response = client.get("/api/e/products", headers={TENANT_HEADER: "nope"})
        assert response.status_code == 404
        assert response.json()["detail"] == "Estabelecimento não encontrado"

    def test_missing_header_wins_over_bad_body(self, client, tenant):
        response = client.post("/api/e/orders", json={"bogus": True})
        assert response.status_code == 400

    def test_public_routes_do_not_need_header(self, client, tenant):
        assert client.get("/api/public/establishments/joe-burger").status_code == 200


class TestTenantAdminToken:
    """Admin operations need a token issued for the same establishment."""

    def test_admin_route_without_token_is_401(self, client, customer_headers):
        response = client.get("/api/e/orders", headers=customer_headers)
        assert response.status_code == 401

    def test_garbage_token_is_401(self, client, customer_headers):
        headers = {**customer_headers, "Authorization": "Bearer not-a-jwt"}
        assert client.get("/api/e/orders", headers=headers).status_code == 401

    def test_token_of_other_tenant_is_403(self, client, tenant, make_establishment, login):
        make_establishment("other-place")
        other_headers = login("other-place")

        headers = {TENANT_HEADER: tenant.slug, "Authorization": other_headers["Authorization"]}
        response = client.get("/api/e/orders", headers=headers)
        assert response.status_code == 403

    def test_superadmin_token_is_not_a_tenant_token(self, client, customer_headers, superadmin_headers):
        headers = {**customer_headers, **superadmin_headers}
        assert client.get("/api/e/orders", headers=headers).status_code == 401

    def test_header_only_mode_when_auth_disabled(self, client, customer_headers, monkeypatch):
        monkeypatch.setattr(settings, "tenant_auth_required", False)
        response = client.get("/api/e/orders", headers=customer_headers)
        assert response.status_code == 200
        assert response.json() == []

    def test_customer_routes_need_only_header(self, client, customer_headers):
        assert client.get("/api/e/products", headers=customer_headers).status_code == 200
        assert client.get("/api/e/categories", headers=customer_headers).status_code == 200
        assert client.get("/api/e/settings/public", headers=customer_headers).status_code == 200
