"""
Tests for webhooks, the cron trigger and the owner's subscription endpoints.
"""

from datetime import timedelta

from rest_api.models import Establishment, Subscription
from shared.config.settings import settings
from shared.utils.dates import add_months, utcnow


WEBHOOK_API_KEY = settings.webhook_api_key

ORDER_SYNC = {
    "api_key": WEBHOOK_API_KEY,
    "store_name": "Sushi do Kenji",
    "owner_email": "kenji@sushi.com",
    "owner_phone": "5511966665555",
    "months": 1,
    "external_order_id": "ext-7",
}


def today():
    return utcnow().date()


class TestOrderSyncWebhook:
    def test_wrong_key_is_401(self, client):
        response = client.post("/api/public/webhooks/order-sync", json={**ORDER_SYNC, "api_key": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Chave de API inválida"

    def test_new_buyer_gets_establishment(self, client, db_session, plans):
        response = client.post("/api/public/webhooks/order-sync", json=ORDER_SYNC)

        assert response.status_code == 200
        body = response.json()
        assert body["created"] is True
        assert body["slug"] == "sushi-do-kenji"

        est = db_session.get(Establishment, body["id"])
        assert est.plan_id == plans["premium"].id
        assert est.paid_until == add_months(today(), 1)

    def test_known_buyer_is_upgraded(self, client, tenant, db_session, plans):
        response = client.post(
            "/api/public/webhooks/order-sync",
            json={**ORDER_SYNC, "owner_email": "JOE@burger.com", "months": 2},
        )

        body = response.json()
        assert body == {"id": tenant.id, "slug": "joe-burger", "created": False}
        db_session.expire_all()
        est = db_session.get(Establishment, tenant.id)
        assert est.plan_id == plans["premium"].id
        assert est.paid_until == add_months(today(), 2)

    def test_invalid_email_is_422(self, client):
        response = client.post("/api/public/webhooks/order-sync", json={**ORDER_SYNC, "owner_email": "kenji"})
        assert response.status_code == 422


class TestPaymentWebhook:
    def _pay(self, client, **overrides):
        payload = {"api_key": WEBHOOK_API_KEY, "slug": "joe-burger", "status": "approved", "months": 1}
        payload.update(overrides)
        return client.post("/api/public/webhooks/payment", json=payload)

    def test_approved_payment_renews(self, client, tenant, db_session, plans):
        response = self._pay(client, payment_id="pay-1")

        assert response.status_code == 200
        expected = add_months(today(), 1)
        assert response.json() == {"renewed": True, "paid_until": expected.isoformat()}
        db_session.expire_all()
        assert db_session.get(Establishment, tenant.id).plan_id == plans["premium"].id

    def test_paid_status_also_renews(self, client, tenant):
        assert self._pay(client, status="PAID").json()["renewed"] is True

    def test_pending_payment_is_acknowledged_only(self, client, tenant, db_session, plans):
        response = self._pay(client, status="pending")

        assert response.status_code == 200
        assert response.json() == {"renewed": False, "paid_until": None}
        db_session.expire_all()
        assert db_session.get(Establishment, tenant.id).plan_id == plans["free"].id

    def test_consecutive_payments_accumulate(self, client, tenant):
        self._pay(client)
        response = self._pay(client)

        assert response.json()["paid_until"] == add_months(add_months(today(), 1), 1).isoformat()

    def test_unknown_slug_is_404(self, client):
        assert self._pay(client, slug="ghost").status_code == 404

    def test_wrong_key_is_401(self, client, tenant):
        assert self._pay(client, api_key="nope").status_code == 401


class TestCronTrigger:
    def test_runs_check_and_reports(self, client, make_establishment, plans, db_session):
        late = make_establishment("late", plan_code="premium", paid_until=today() - timedelta(days=2))
        make_establishment("soon", plan_code="premium", paid_until=today() + timedelta(days=7))

        response = client.post("/api/public/cron/check-subscriptions")

        assert response.status_code == 200
        report = response.json()
        assert report["checked"] == 2
        assert report["downgraded"] == 1
        assert report["reminders_7d"] == 1
        assert report["errors"] == 0
        db_session.expire_all()
        assert db_session.get(Establishment, late.id).plan_id == plans["free"].id

    def test_secret_required_when_configured(self, client, monkeypatch):
        monkeypatch.setattr(settings, "cron_secret", "cron-123")

        assert client.post("/api/public/cron/check-subscriptions").status_code == 401
        response = client.post(
            "/api/public/cron/check-subscriptions", headers={"X-Cron-Secret": "wrong"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Segredo do cron inválido"

        response = client.post(
            "/api/public/cron/check-subscriptions", headers={"X-Cron-Secret": "cron-123"}
        )
        assert response.status_code == 200


class TestOwnerSubscriptionEndpoints:
    def test_status_of_free_establishment(self, client, admin_headers):
        response = client.get("/api/e/subscription", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["plan_code"] == "free"
        assert body["lifecycle_state"] == "free"
        assert body["paid_until"] is None
        assert body["subscription"] is None

    def test_upgrade_request_is_pending(self, client, admin_headers, plans, db_session, tenant):
        response = client.post(
            "/api/e/subscription/upgrade",
            json={"plan_id": plans["premium"].id, "months": 3},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"
        assert response.json()["price"] == round(plans["premium"].price * 3, 2)

        db_session.expire_all()
        assert db_session.get(Establishment, tenant.id).plan_id == plans["free"].id
        status = client.get("/api/e/subscription", headers=admin_headers).json()
        assert status["subscription"]["status"] == "pending"

    def test_upgrade_to_free_is_400(self, client, admin_headers, plans):
        response = client.post(
            "/api/e/subscription/upgrade", json={"plan_id": plans["free"].id}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_renew_records_pending_then_payment_activates(self, client, admin_headers, db_session, tenant):
        response = client.post("/api/e/subscription/renew", json={"months": 2}, headers=admin_headers)
        assert response.status_code == 201
        subscription_id = response.json()["id"]

        client.post(
            "/api/public/webhooks/payment",
            json={"api_key": WEBHOOK_API_KEY, "slug": tenant.slug, "status": "approved", "months": 2},
        )

        db_session.expire_all()
        subscription = db_session.get(Subscription, subscription_id)
        assert subscription.status == "active"
        assert subscription.end_date == add_months(today(), 2)

        status = client.get("/api/e/subscription", headers=admin_headers).json()
        assert status["plan_code"] == "premium"
        assert status["lifecycle_state"] == "premium-active"

    def test_months_out_of_range_is_422(self, client, admin_headers):
        response = client.post("/api/e/subscription/renew", json={"months": 0}, headers=admin_headers)
        assert response.status_code == 422

    def test_requires_admin(self, client, customer_headers):
        assert client.get("/api/e/subscription", headers=customer_headers).status_code == 401
