"""
Subscription lifecycle engine.

States (derived from plan, status and paid_until):
    free
    premium-active
    premium-expiring-7d   paid_until == today + 7  -> first reminder
    premium-expiring-3d   paid_until == today + 3  -> urgent reminder
    premium-expired       paid_until <  today      -> downgrade to free

Reminder triggers match the day exactly: an establishment not checked on
day 7 gets no 7-day reminder on day 6. Reminders are de-duplicated against
the reminders_sent log (3 days for the 7-day notice, 2 days for the 3-day one).

Every establishment is evaluated on its own; a failure is logged and counted
and the batch moves on to the next one.

Usage:
    service = SubscriptionService(db, get_notification_dispatcher())
    report = await service.check_subscriptions()
    paid_until = await service.renew(establishment, months=1)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import (
    Category,
    Establishment,
    Neighborhood,
    Plan,
    ReminderSent,
    Subscription,
    Table,
)
from rest_api.repositories import EstablishmentRepository, PlanRepository
from rest_api.services.domain.establishment_service import EstablishmentService
from rest_api.services.notifications import (
    GatewayCredentials,
    NotificationDispatcher,
    OutboundMessage,
    SkippedMessage,
)
from rest_api.services.notifications import messages
from shared.config.constants import (
    EstablishmentStatus,
    LifecycleState,
    Limits,
    PlanCode,
    ReminderPolicy,
    ReminderType,
    SubscriptionStatus,
)
from shared.config.logging import mask_email, subscription_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security import generate_password, hash_password
from shared.utils.dates import add_months, utcnow
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    OrderSyncWebhook,
    SubscriptionCheckReport,
    SubscriptionOutput,
    SubscriptionStatusOutput,
)
from shared.utils.validators import normalize_phone

# Starter catalog given to establishments created from an external order
SYNC_CATEGORY_NAME = "Cardápio"
SYNC_NEIGHBORHOOD_NAME = "Centro"


@dataclass
class SyncResult:
    establishment: Establishment
    created: bool


def lifecycle_state(plan_code: str, paid_until: Optional[date], today: date) -> str:
    """Name of the lifecycle state an establishment is in today."""
    if plan_code == PlanCode.FREE:
        return LifecycleState.FREE
    if paid_until is None:
        return LifecycleState.PREMIUM_ACTIVE
    days_left = (paid_until - today).days
    if days_left < 0:
        return LifecycleState.PREMIUM_EXPIRED
    if days_left <= ReminderPolicy.URGENT_NOTICE_DAYS:
        return LifecycleState.PREMIUM_EXPIRING_3D
    if days_left <= ReminderPolicy.FIRST_NOTICE_DAYS:
        return LifecycleState.PREMIUM_EXPIRING_7D
    return LifecycleState.PREMIUM_ACTIVE


class SubscriptionService:
    """Plan/status/paid_until transitions and their WhatsApp notices."""

    def __init__(
        self,
        db: Session,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._db = db
        self._dispatcher = dispatcher
        self._clock = clock
        self._plans = PlanRepository(db)
        self._establishments = EstablishmentRepository(db)

    # =========================================================================
    # Batch check
    # =========================================================================

    async def check_subscriptions(self) -> SubscriptionCheckReport:
        """Evaluate every active paid establishment once, sequentially."""
        now = self._clock()
        today = now.date()
        report = SubscriptionCheckReport()

        free_plan = self._plans.find_by_code(PlanCode.FREE)
        if free_plan is None:
            logger.error("Subscription check aborted: free plan missing")
            report.errors += 1
            return report

        query = (
            select(Establishment.id)
            .join(Plan, Establishment.plan_id == Plan.id)
            .where(
                Plan.code != PlanCode.FREE,
                Establishment.status == EstablishmentStatus.ACTIVE,
                Establishment.paid_until.is_not(None),
            )
            .order_by(Establishment.id)
        )
        establishment_ids = list(self._db.execute(query).scalars().all())

        for establishment_id in establishment_ids:
            report.checked += 1
            try:
                await self._evaluate(establishment_id, free_plan, today, now, report)
            except Exception as e:
                self._db.rollback()
                report.errors += 1
                logger.error(
                    "Subscription check failed for establishment",
                    establishment_id=establishment_id,
                    error=str(e),
                    exc_info=True,
                )

        logger.info("Subscription check finished", **report.model_dump())
        return report

    async def _evaluate(
        self,
        establishment_id: int,
        free_plan: Plan,
        today: date,
        now: datetime,
        report: SubscriptionCheckReport,
    ) -> None:
        establishment = self._establishments.find_by_id(establishment_id)
        days_left = (establishment.paid_until - today).days

        if days_left == ReminderPolicy.FIRST_NOTICE_DAYS:
            if self._reminded_recently(
                establishment_id, ReminderType.EXPIRING_7D, ReminderPolicy.FIRST_NOTICE_DEDUP_DAYS, now
            ):
                report.skipped_duplicates += 1
                return
            await self._send_reminder(establishment, ReminderType.EXPIRING_7D, days_left, now)
            report.reminders_7d += 1

        elif days_left == ReminderPolicy.URGENT_NOTICE_DAYS:
            if self._reminded_recently(
                establishment_id, ReminderType.EXPIRING_3D, ReminderPolicy.URGENT_NOTICE_DEDUP_DAYS, now
            ):
                report.skipped_duplicates += 1
                return
            await self._send_reminder(establishment, ReminderType.EXPIRING_3D, days_left, now)
            report.reminders_3d += 1

        elif days_left < 0:
            await self._downgrade(establishment, free_plan, now)
            report.downgraded += 1

    def _reminded_recently(self, establishment_id: int, reminder_type: str, window_days: int, now: datetime) -> bool:
        query = (
            select(func.count())
            .select_from(ReminderSent)
            .where(
                ReminderSent.establishment_id == establishment_id,
                ReminderSent.reminder_type == reminder_type,
                ReminderSent.sent_at >= now - timedelta(days=window_days),
            )
        )
        return (self._db.scalar(query) or 0) > 0

    async def _send_reminder(self, establishment: Establishment, reminder_type: str, days_left: int, now: datetime) -> None:
        # Logged before sending: a crash after this point never produces a second reminder
        self._db.add(ReminderSent(establishment_id=establishment.id, reminder_type=reminder_type, sent_at=now))
        safe_commit(self._db)

        text = messages.build_expiry_reminder(establishment.name, establishment.paid_until, days_left)
        await self._notify(reminder_type, establishment.owner_phone, text, establishment.id)
        logger.info(
            "Renewal reminder sent",
            establishment_id=establishment.id,
            reminder_type=reminder_type,
            paid_until=str(establishment.paid_until),
        )

    async def _downgrade(self, establishment: Establishment, free_plan: Plan, now: datetime) -> None:
        establishment.plan_id = free_plan.id
        for subscription in self._subscriptions(establishment.id, SubscriptionStatus.ACTIVE):
            subscription.status = SubscriptionStatus.EXPIRED
        self._db.add(
            ReminderSent(establishment_id=establishment.id, reminder_type=ReminderType.EXPIRED, sent_at=now)
        )
        safe_commit(self._db)

        logger.warning(
            "Establishment downgraded to free plan",
            establishment_id=establishment.id,
            slug=establishment.slug,
            paid_until=str(establishment.paid_until),
        )
        await self._notify(
            ReminderType.EXPIRED,
            establishment.owner_phone,
            messages.build_expired_notice(establishment.name),
            establishment.id,
        )
        await self._notify(
            "operator_expired",
            settings.operator_whatsapp,
            messages.build_operator_expired_notice(establishment.name, establishment.slug, establishment.owner_email),
            establishment.id,
        )

    # =========================================================================
    # Renewal / upgrade
    # =========================================================================

    async def renew(self, establishment: Establishment, months: int, *, notify: bool = True) -> date:
        """
        Activate the paid plan for `months` more calendar months.

        The period is added to paid_until, or to today when paid_until is
        missing or already past. A pending upgrade request, if any, is
        activated; otherwise the active subscription record is extended or
        a new one is created.

        Returns:
            The new paid_until.
        """
        self._check_months(months)
        now = self._clock()
        today = now.date()

        pending = self._latest_subscription(establishment.id, SubscriptionStatus.PENDING)
        plan = pending.plan if pending is not None else self._require_premium()

        start = establishment.paid_until if establishment.paid_until and establishment.paid_until > today else today
        paid_until = add_months(start, months)

        establishment.plan_id = plan.id
        establishment.status = EstablishmentStatus.ACTIVE
        establishment.paid_until = paid_until
        establishment.last_payment_at = now

        subscription = self._latest_subscription(establishment.id, SubscriptionStatus.ACTIVE)
        if subscription is None:
            subscription = pending
        if subscription is None:
            subscription = Subscription(establishment_id=establishment.id, start_date=today)
            self._db.add(subscription)
        if subscription is not pending:
            subscription.price = round(plan.price * months, 2)
        subscription.plan_id = plan.id
        subscription.status = SubscriptionStatus.ACTIVE
        subscription.start_date = subscription.start_date or today
        subscription.end_date = paid_until
        subscription.next_payment_date = paid_until
        if pending is not None and subscription is not pending:
            # Folded into the already active record
            pending.status = SubscriptionStatus.CANCELLED

        safe_commit(self._db)
        logger.info(
            "Subscription renewed",
            establishment_id=establishment.id,
            plan_code=plan.code,
            months=months,
            paid_until=str(paid_until),
        )

        if notify:
            await self._notify(
                "renewal",
                establishment.owner_phone,
                messages.build_renewal_confirmation(establishment.name, paid_until),
                establishment.id,
            )
        return paid_until

    def request_upgrade(self, establishment: Establishment, plan_id: int, months: int) -> SubscriptionOutput:
        """Record a pending subscription; the payment webhook activates it."""
        self._check_months(months)
        plan = self._plans.find_by_id(plan_id)
        if plan is None or plan.code == PlanCode.FREE:
            raise ValidationError("Plano inválido para upgrade", field="plan_id", plan_id=plan_id)

        for previous in self._subscriptions(establishment.id, SubscriptionStatus.PENDING):
            previous.status = SubscriptionStatus.CANCELLED

        subscription = Subscription(
            establishment_id=establishment.id,
            plan_id=plan.id,
            price=round(plan.price * months, 2),
            status=SubscriptionStatus.PENDING,
        )
        self._db.add(subscription)
        safe_commit(self._db)
        self._db.refresh(subscription)

        logger.info(
            "Upgrade requested",
            establishment_id=establishment.id,
            plan_code=plan.code,
            months=months,
            price=subscription.price,
        )
        return SubscriptionOutput.model_validate(subscription)

    def status(self, establishment: Establishment) -> SubscriptionStatusOutput:
        today = self._clock().date()
        plan = establishment.plan
        subscription = self._latest_subscription(establishment.id, SubscriptionStatus.ACTIVE)
        if subscription is None:
            subscription = self._latest_subscription(establishment.id, SubscriptionStatus.PENDING)
        days_remaining = (establishment.paid_until - today).days if establishment.paid_until else None

        return SubscriptionStatusOutput(
            plan_code=plan.code,
            plan_name=plan.name,
            status=establishment.status,
            paid_until=establishment.paid_until,
            days_remaining=days_remaining,
            lifecycle_state=lifecycle_state(plan.code, establishment.paid_until, today),
            subscription=SubscriptionOutput.model_validate(subscription) if subscription else None,
        )

    # =========================================================================
    # External storefront sync
    # =========================================================================

    async def sync_from_external_order(self, payload: OrderSyncWebhook) -> SyncResult:
        """
        Upgrade the establishment owned by the buyer, or create one.

        The owner is matched by e-mail or phone. New establishments get a
        generated slug and password, default settings, one category, one
        neighborhood and five tables.
        """
        phone = normalize_phone(payload.owner_phone)
        existing = self._establishments.find_by_owner_contact(payload.owner_email, phone)

        if existing is not None:
            paid_until = await self.renew(existing, payload.months, notify=False)
            await self._notify(
                "upgrade",
                existing.owner_phone or phone,
                messages.build_upgrade_message(existing.name, paid_until),
                existing.id,
            )
            logger.info(
                "External order upgraded establishment",
                establishment_id=existing.id,
                external_order_id=payload.external_order_id,
            )
            return SyncResult(establishment=existing, created=False)

        now = self._clock()
        today = now.date()
        plan = self._require_premium()
        paid_until = add_months(today, payload.months)
        password = generate_password()

        establishments = EstablishmentService(self._db)
        establishment = establishments.provision(
            name=payload.store_name,
            slug=establishments.unique_slug(payload.store_name),
            owner_email=payload.owner_email,
            owner_phone=phone,
            password_hash=hash_password(password),
            plan=plan,
            paid_until=paid_until,
            last_payment_at=now,
        )
        self._db.add(Category(establishment_id=establishment.id, name=SYNC_CATEGORY_NAME))
        self._db.add(Neighborhood(establishment_id=establishment.id, name=SYNC_NEIGHBORHOOD_NAME, delivery_fee=0.0))
        for number in range(1, Limits.TABLES_CREATED_ON_SYNC + 1):
            self._db.add(Table(establishment_id=establishment.id, number=number))
        self._db.add(
            Subscription(
                establishment_id=establishment.id,
                plan_id=plan.id,
                price=round(plan.price * payload.months, 2),
                status=SubscriptionStatus.ACTIVE,
                start_date=today,
                end_date=paid_until,
                next_payment_date=paid_until,
            )
        )
        safe_commit(self._db)

        logger.info(
            "Establishment created from external order",
            establishment_id=establishment.id,
            slug=establishment.slug,
            owner_email=mask_email(establishment.owner_email),
            external_order_id=payload.external_order_id,
        )
        await self._notify(
            "welcome",
            phone,
            messages.build_welcome_message(establishment.name, establishment.slug, password, paid_until),
            establishment.id,
        )
        return SyncResult(establishment=establishment, created=True)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _notify(self, kind: str, number: Optional[str], text: str, establishment_id: int) -> None:
        credentials = GatewayCredentials.platform()
        if credentials is None:
            self._dispatcher.skip(SkippedMessage(kind, "platform gateway not configured", establishment_id))
            return
        if not number:
            self._dispatcher.skip(SkippedMessage(kind, "no destination number", establishment_id))
            return
        await self._dispatcher.deliver(
            OutboundMessage(
                kind=kind,
                credentials=credentials,
                number=number,
                text=text,
                establishment_id=establishment_id,
            )
        )

    def _require_premium(self) -> Plan:
        return EstablishmentService(self._db).require_plan(PlanCode.PREMIUM)

    def _subscriptions(self, establishment_id: int, status: str) -> list[Subscription]:
        query = select(Subscription).where(
            Subscription.establishment_id == establishment_id,
            Subscription.status == status,
        )
        return list(self._db.execute(query).scalars().all())

    def _latest_subscription(self, establishment_id: int, status: str) -> Optional[Subscription]:
        query = (
            select(Subscription)
            .where(
                Subscription.establishment_id == establishment_id,
                Subscription.status == status,
            )
            .order_by(Subscription.id.desc())
            .limit(1)
        )
        return self._db.scalar(query)

    @staticmethod
    def _check_months(months: int) -> None:
        if not 1 <= months <= Limits.MAX_SUBSCRIPTION_MONTHS:
            raise ValidationError(
                f"Meses deve estar entre 1 e {Limits.MAX_SUBSCRIPTION_MONTHS}",
                field="months",
                months=months,
            )
