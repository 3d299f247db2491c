"""
Tests for middlewares, request context and the commit helper.
"""

import logging
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rest_api.core.middlewares import (
    JSONBodyMiddleware,
    RequestLogMiddleware,
    SecurityHeadersMiddleware,
    register_middlewares,
)
from shared.config.settings import settings
from shared.infrastructure.correlation import (
    RequestContextFilter,
    RequestContextMiddleware,
    get_request_id,
    get_tenant_slug,
    request_id_var,
    tenant_slug_var,
)
from shared.infrastructure.db import safe_commit


def _record() -> logging.LogRecord:
    return logging.LogRecord("test", logging.INFO, __file__, 1, "msg", (), None)


class TestSecurityHeaders:
    @pytest.fixture
    def app(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/menu")
        def menu():
            return []

        return app

    def test_hardening_headers(self, app):
        response = TestClient(app).get("/menu")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]
        assert "Strict-Transport-Security" not in response.headers

    def test_hsts_only_in_production(self, app, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        response = TestClient(app).get("/menu")
        assert response.headers["Strict-Transport-Security"].startswith("max-age=31536000")


class TestJSONBody:
    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(JSONBodyMiddleware)

        @app.post("/api/e/orders")
        def place_order():
            return {"id": 1}

        return TestClient(app)

    def test_json_accepted(self, client):
        assert client.post("/api/e/orders", json={"customer_name": "Ana"}).status_code == 200

    def test_json_with_charset_accepted(self, client):
        response = client.post(
            "/api/e/orders",
            content=b'{"customer_name": "Ana"}',
            headers={"Content-Type": "application/json; charset=utf-8"},
        )
        assert response.status_code == 200

    def test_form_rejected(self, client):
        response = client.post("/api/e/orders", data={"customer_name": "Ana"})
        assert response.status_code == 415
        assert "application/json" in response.json()["detail"]


class TestRequestContext:
    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(RequestContextMiddleware)

        @app.get("/ctx")
        def ctx():
            return {"request_id": get_request_id(), "tenant": get_tenant_slug()}

        return TestClient(app)

    def test_generates_request_id(self, client):
        response = client.get("/ctx")

        request_id = response.headers["X-Request-ID"]
        assert len(request_id) == 32
        assert response.json()["request_id"] == request_id

    def test_keeps_sane_client_id(self, client):
        response = client.get("/ctx", headers={"X-Request-ID": "pedido-trace-12345"})
        assert response.headers["X-Request-ID"] == "pedido-trace-12345"

    def test_replaces_unsafe_client_id(self, client):
        response = client.get("/ctx", headers={"X-Request-ID": "x" * 200})
        assert response.headers["X-Request-ID"] != "x" * 200

    def test_tenant_slug_from_header(self, client):
        response = client.get("/ctx", headers={"X-Establishment-Slug": " Joe-Burger "})
        assert response.json()["tenant"] == "joe-burger"

    def test_context_cleared_after_request(self, client):
        client.get("/ctx", headers={"X-Establishment-Slug": "joe-burger"})
        assert get_tenant_slug() == ""


class TestRequestContextFilter:
    def test_copies_context_onto_record(self):
        request_token = request_id_var.set("req-123")
        tenant_token = tenant_slug_var.set("joe-burger")
        try:
            record = _record()
            assert RequestContextFilter().filter(record) is True
            assert record.request_id == "req-123"
            assert record.tenant == "joe-burger"
        finally:
            request_id_var.reset(request_token)
            tenant_slug_var.reset(tenant_token)

    def test_dash_outside_requests(self):
        record = _record()
        RequestContextFilter().filter(record)
        assert record.request_id == "-"
        assert record.tenant == "-"


class TestSafeCommit:
    def test_commits(self):
        db = MagicMock()
        safe_commit(db)
        db.commit.assert_called_once()
        db.rollback.assert_not_called()

    def test_rolls_back_and_reraises(self):
        db = MagicMock()
        db.commit.side_effect = RuntimeError("constraint")

        with pytest.raises(RuntimeError):
            safe_commit(db)
        db.rollback.assert_called_once()


class TestRegisterMiddlewares:
    def test_all_registered_with_context_outermost(self):
        app = FastAPI()
        register_middlewares(app)

        classes = [m.cls for m in app.user_middleware]
        assert classes[0] is RequestContextMiddleware
        assert {SecurityHeadersMiddleware, JSONBodyMiddleware, RequestLogMiddleware} <= set(classes)

    def test_full_app_responses_carry_headers(self, client):
        response = client.get("/api/health")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "X-Request-ID" in response.headers
