"""
Tests for the subscription lifecycle engine.
"""

import json
from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from rest_api.models import (
    Category,
    Establishment,
    Neighborhood,
    ReminderSent,
    Setting,
    Subscription,
    Table,
)
from rest_api.services.domain import SubscriptionService, lifecycle_state
from shared.config.settings import settings
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import OrderSyncWebhook


TODAY = date(2026, 3, 10)


@pytest.fixture
def platform_gateway(monkeypatch):
    """Platform number configured for billing messages, operator copied on expiry."""
    monkeypatch.setattr(settings, "platform_evolution_api_url", "http://platform.test")
    monkeypatch.setattr(settings, "platform_evolution_instance", "mqc")
    monkeypatch.setattr(settings, "platform_evolution_api_key", "platform-key")
    monkeypatch.setattr(settings, "operator_whatsapp", "5511900000000")


@pytest.fixture
def service(db_session, dispatcher, clock):
    return SubscriptionService(db_session, dispatcher, clock=clock)


def sent_numbers(gateway) -> list[str]:
    return [json.loads(r.content)["number"] for r in gateway.requests]


def reminder_count(db_session, establishment_id: int, reminder_type: str) -> int:
    return db_session.scalar(
        select(func.count())
        .select_from(ReminderSent)
        .where(
            ReminderSent.establishment_id == establishment_id,
            ReminderSent.reminder_type == reminder_type,
        )
    )


class TestLifecycleState:
    def test_states(self):
        assert lifecycle_state("free", None, TODAY) == "free"
        assert lifecycle_state("premium", TODAY + timedelta(days=30), TODAY) == "premium-active"
        assert lifecycle_state("premium", TODAY + timedelta(days=7), TODAY) == "premium-expiring-7d"
        assert lifecycle_state("premium", TODAY + timedelta(days=5), TODAY) == "premium-expiring-7d"
        assert lifecycle_state("premium", TODAY + timedelta(days=3), TODAY) == "premium-expiring-3d"
        assert lifecycle_state("premium", TODAY, TODAY) == "premium-expiring-3d"
        assert lifecycle_state("premium", TODAY - timedelta(days=1), TODAY) == "premium-expired"

    def test_paid_plan_without_date_is_active(self):
        assert lifecycle_state("premium", None, TODAY) == "premium-active"


class TestReminders:
    @pytest.mark.asyncio
    async def test_seven_day_reminder(self, db_session, service, make_establishment, platform_gateway, gateway):
        est = make_establishment("seven", plan_code="premium", paid_until=TODAY + timedelta(days=7))

        report = await service.check_subscriptions()

        assert report.checked == 1
        assert report.reminders_7d == 1
        assert reminder_count(db_session, est.id, "expiring_7d") == 1
        assert sent_numbers(gateway) == [est.owner_phone]
        assert "7 dias" in json.loads(gateway.requests[0].content)["text"]
        assert gateway.requests[0].headers["apikey"] == "platform-key"
        assert str(gateway.requests[0].url) == "http://platform.test/message/sendText/mqc"

    @pytest.mark.asyncio
    async def test_second_run_same_day_is_deduplicated(
        self, db_session, service, make_establishment, platform_gateway, gateway
    ):
        est = make_establishment("seven", plan_code="premium", paid_until=TODAY + timedelta(days=7))

        await service.check_subscriptions()
        report = await service.check_subscriptions()

        assert report.reminders_7d == 0
        assert report.skipped_duplicates == 1
        assert reminder_count(db_session, est.id, "expiring_7d") == 1
        assert len(gateway.requests) == 1

    @pytest.mark.asyncio
    async def test_dedup_window_expires(self, db_session, service, clock, make_establishment, gateway):
        est = make_establishment("seven", plan_code="premium", paid_until=TODAY + timedelta(days=7))
        db_session.add(
            ReminderSent(
                establishment_id=est.id,
                reminder_type="expiring_7d",
                sent_at=clock() - timedelta(days=4),
            )
        )
        db_session.commit()

        report = await service.check_subscriptions()

        assert report.reminders_7d == 1
        assert reminder_count(db_session, est.id, "expiring_7d") == 2

    @pytest.mark.asyncio
    async def test_three_day_reminder(self, db_session, service, make_establishment, platform_gateway, gateway):
        est = make_establishment("three", plan_code="premium", paid_until=TODAY + timedelta(days=3))

        report = await service.check_subscriptions()

        assert report.reminders_3d == 1
        assert reminder_count(db_session, est.id, "expiring_3d") == 1
        assert "Atenção" in json.loads(gateway.requests[0].content)["text"]

    @pytest.mark.asyncio
    async def test_three_day_dedup_window_is_two_days(self, db_session, service, clock, make_establishment):
        est = make_establishment("three", plan_code="premium", paid_until=TODAY + timedelta(days=3))
        db_session.add(
            ReminderSent(establishment_id=est.id, reminder_type="expiring_3d", sent_at=clock() - timedelta(days=1))
        )
        db_session.commit()

        report = await service.check_subscriptions()

        assert report.skipped_duplicates == 1
        assert report.reminders_3d == 0

    @pytest.mark.asyncio
    async def test_exact_day_only(self, service, make_establishment, gateway):
        make_establishment("six", plan_code="premium", paid_until=TODAY + timedelta(days=6))
        make_establishment("four", plan_code="premium", paid_until=TODAY + timedelta(days=4))

        report = await service.check_subscriptions()

        assert report.checked == 2
        assert report.reminders_7d == 0
        assert report.reminders_3d == 0
        assert gateway.requests == []

    @pytest.mark.asyncio
    async def test_reminder_logged_even_without_gateway(self, db_session, service, make_establishment, dispatcher):
        est = make_establishment("seven", plan_code="premium", paid_until=TODAY + timedelta(days=7))

        report = await service.check_subscriptions()

        assert report.reminders_7d == 1
        assert reminder_count(db_session, est.id, "expiring_7d") == 1
        assert dispatcher.stats()["recent"][-1]["detail"] == "platform gateway not configured"

    @pytest.mark.asyncio
    async def test_free_and_suspended_are_not_checked(self, service, make_establishment):
        make_establishment("free-one", plan_code="free", paid_until=TODAY - timedelta(days=1))
        make_establishment(
            "suspended-one", plan_code="premium", paid_until=TODAY - timedelta(days=1), status="suspended"
        )
        make_establishment("no-date", plan_code="premium", paid_until=None)

        report = await service.check_subscriptions()

        assert report.checked == 0
        assert report.downgraded == 0


class TestDowngrade:
    @pytest.mark.asyncio
    async def test_expired_premium_goes_free(
        self, db_session, service, make_establishment, plans, platform_gateway, gateway
    ):
        est = make_establishment("late", plan_code="premium", paid_until=TODAY - timedelta(days=1))
        db_session.add(
            Subscription(
                establishment_id=est.id,
                plan_id=plans["premium"].id,
                price=49.9,
                status="active",
                start_date=TODAY - timedelta(days=31),
                end_date=TODAY - timedelta(days=1),
            )
        )
        db_session.commit()

        report = await service.check_subscriptions()

        assert report.downgraded == 1
        db_session.expire_all()
        refreshed = db_session.get(Establishment, est.id)
        assert refreshed.plan_id == plans["free"].id
        statuses = db_session.execute(
            select(Subscription.status).where(Subscription.establishment_id == est.id)
        ).scalars().all()
        assert statuses == ["expired"]
        assert reminder_count(db_session, est.id, "expired") == 1
        assert sent_numbers(gateway) == [est.owner_phone, "5511900000000"]

    @pytest.mark.asyncio
    async def test_downgraded_only_once(self, service, make_establishment, platform_gateway, gateway):
        make_establishment("late", plan_code="premium", paid_until=TODAY - timedelta(days=10))

        first = await service.check_subscriptions()
        second = await service.check_subscriptions()

        assert first.downgraded == 1
        assert second.checked == 0
        assert len(gateway.requests) == 2

    @pytest.mark.asyncio
    async def test_failure_on_one_establishment_does_not_stop_batch(
        self, db_session, service, make_establishment, monkeypatch
    ):
        broken = make_establishment("broken", plan_code="premium", paid_until=TODAY + timedelta(days=7))
        late = make_establishment("late", plan_code="premium", paid_until=TODAY - timedelta(days=1))

        original = SubscriptionService._send_reminder

        async def failing_send(self, establishment, *args, **kwargs):
            if establishment.id == broken.id:
                raise RuntimeError("boom")
            return await original(self, establishment, *args, **kwargs)

        monkeypatch.setattr(SubscriptionService, "_send_reminder", failing_send)

        report = await service.check_subscriptions()

        assert report.checked == 2
        assert report.errors == 1
        assert report.downgraded == 1
        db_session.expire_all()
        assert db_session.get(Establishment, late.id).plan.code == "free"


class TestRenew:
    @pytest.mark.asyncio
    async def test_renew_extends_from_paid_until(self, db_session, service, make_establishment, plans):
        est = make_establishment("early", plan_code="premium", paid_until=date(2026, 3, 20))

        paid_until = await service.renew(est, 1)

        assert paid_until == date(2026, 4, 20)
        db_session.expire_all()
        refreshed = db_session.get(Establishment, est.id)
        assert refreshed.paid_until == date(2026, 4, 20)
        assert refreshed.plan_id == plans["premium"].id
        assert refreshed.last_payment_at is not None

    @pytest.mark.asyncio
    async def test_renew_after_expiry_starts_today(self, service, make_establishment):
        est = make_establishment("late", plan_code="free", paid_until=date(2026, 1, 5))

        paid_until = await service.renew(est, 2)

        assert paid_until == date(2026, 5, 10)

    @pytest.mark.asyncio
    async def test_renew_clamps_month_end(self, service, clock, make_establishment):
        clock.set_date(date(2026, 1, 31))
        est = make_establishment("jan", plan_code="free")

        assert await service.renew(est, 1) == date(2026, 2, 28)

    @pytest.mark.asyncio
    async def test_renew_creates_then_extends_active_record(self, db_session, service, make_establishment):
        est = make_establishment("joe", plan_code="free")

        await service.renew(est, 1)
        await service.renew(est, 1)

        rows = db_session.execute(
            select(Subscription).where(Subscription.establishment_id == est.id)
        ).scalars().all()
        assert len(rows) == 1
        assert rows[0].status == "active"
        assert rows[0].end_date == date(2026, 5, 10)

    @pytest.mark.asyncio
    async def test_renew_activates_pending_upgrade(self, db_session, service, make_establishment, plans):
        est = make_establishment("joe", plan_code="free")
        pending = service.request_upgrade(est, plans["premium"].id, 3)

        await service.renew(est, 3)

        row = db_session.get(Subscription, pending.id)
        assert row.status == "active"
        assert row.price == round(plans["premium"].price * 3, 2)
        assert row.end_date == date(2026, 6, 10)

    @pytest.mark.asyncio
    async def test_renew_sends_confirmation(self, service, make_establishment, platform_gateway, gateway):
        est = make_establishment("joe", plan_code="free")

        await service.renew(est, 1)

        assert sent_numbers(gateway) == [est.owner_phone]
        assert "Pagamento confirmado" in json.loads(gateway.requests[0].content)["text"]

    @pytest.mark.asyncio
    async def test_months_out_of_range(self, service, make_establishment):
        est = make_establishment("joe", plan_code="free")
        with pytest.raises(ValidationError):
            await service.renew(est, 0)


class TestUpgradeRequest:
    def test_records_pending_priced_by_months(self, service, make_establishment, plans):
        est = make_establishment("joe", plan_code="free")

        result = service.request_upgrade(est, plans["premium"].id, 2)

        assert result.status == "pending"
        assert result.price == round(plans["premium"].price * 2, 2)
        assert result.plan_id == plans["premium"].id

    def test_new_request_cancels_previous(self, db_session, service, make_establishment, plans):
        est = make_establishment("joe", plan_code="free")
        first = service.request_upgrade(est, plans["premium"].id, 1)

        service.request_upgrade(est, plans["premium"].id, 6)

        assert db_session.get(Subscription, first.id).status == "cancelled"

    def test_free_plan_is_not_an_upgrade(self, service, make_establishment, plans):
        est = make_establishment("joe", plan_code="free")
        with pytest.raises(ValidationError):
            service.request_upgrade(est, plans["free"].id, 1)

    def test_status_reports_lifecycle(self, service, make_establishment):
        est = make_establishment("joe", plan_code="premium", paid_until=TODAY + timedelta(days=3))

        status = service.status(est)

        assert status.plan_code == "premium"
        assert status.days_remaining == 3
        assert status.lifecycle_state == "premium-expiring-3d"
        assert status.subscription is None


class TestExternalOrderSync:
    PAYLOAD = OrderSyncWebhook(
        api_key="ignored-here",
        store_name="Pizzaria Bella Napoli",
        owner_email="bella@napoli.com",
        owner_phone="+55 (11) 97777-1234",
        months=3,
        external_order_id="ext-42",
    )

    @pytest.mark.asyncio
    async def test_creates_ready_to_use_establishment(
        self, db_session, service, plans, platform_gateway, gateway
    ):
        result = await service.sync_from_external_order(self.PAYLOAD)

        assert result.created is True
        est = result.establishment
        assert est.slug == "pizzaria-bella-napoli"
        assert est.plan_id == plans["premium"].id
        assert est.paid_until == date(2026, 6, 10)
        assert est.owner_phone == "5511977771234"

        def count(model):
            return db_session.scalar(
                select(func.count()).select_from(model).where(model.establishment_id == est.id)
            )

        assert count(Category) == 1
        assert count(Neighborhood) == 1
        assert count(Table) == 5
        assert count(Setting) == 3
        assert count(Subscription) == 1

        assert sent_numbers(gateway) == ["5511977771234"]
        assert "Bem-vindo" in json.loads(gateway.requests[0].content)["text"]

    @pytest.mark.asyncio
    async def test_generated_slug_is_unique(self, service, make_establishment):
        make_establishment("pizzaria-bella-napoli")

        result = await service.sync_from_external_order(self.PAYLOAD)

        assert result.establishment.slug == "pizzaria-bella-napoli-2"

    @pytest.mark.asyncio
    async def test_existing_owner_is_upgraded(self, db_session, service, make_establishment, plans):
        existing = make_establishment("bella", plan_code="free", owner_email="Bella@Napoli.com")

        result = await service.sync_from_external_order(self.PAYLOAD)

        assert result.created is False
        assert result.establishment.id == existing.id
        db_session.expire_all()
        refreshed = db_session.get(Establishment, existing.id)
        assert refreshed.plan_id == plans["premium"].id
        assert refreshed.paid_until == date(2026, 6, 10)
        assert db_session.scalar(select(func.count()).select_from(Establishment)) == 1

    @pytest.mark.asyncio
    async def test_existing_owner_matched_by_phone(self, service, make_establishment):
        existing = make_establishment("bella", owner_email="other@mail.com", owner_phone="5511977771234")

        result = await service.sync_from_external_order(self.PAYLOAD)

        assert result.establishment.id == existing.id
