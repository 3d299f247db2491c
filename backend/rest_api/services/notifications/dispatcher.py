"""
Notification dispatcher.

Delivery is best-effort and at-most-once: one attempt, no retry, and a
failure never reaches the caller. Every outcome (sent, failed, skipped) is
counted and kept in a bounded log so discarded messages stay observable
through the detailed health endpoint.

Usage:
    dispatcher = get_notification_dispatcher()

    # From a request handler: runs after the response is sent
    dispatcher.schedule(background_tasks, message)

    # From a batch job
    await dispatcher.deliver(message)
"""

from __future__ import annotations

import threading
from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from fastapi import BackgroundTasks

from shared.config.logging import mask_phone, notification_logger as logger
from .gateway import GatewayCredentials, GatewayError, WhatsAppGateway


class DispatchOutcome:
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"

    ALL = [SENT, FAILED, SKIPPED]


@dataclass(frozen=True)
class OutboundMessage:
    """A message ready to be posted to the gateway."""

    kind: str
    credentials: GatewayCredentials
    number: str
    text: str
    establishment_id: Optional[int] = None


@dataclass(frozen=True)
class SkippedMessage:
    """A message that was not sent, and why."""

    kind: str
    reason: str
    establishment_id: Optional[int] = None


PlannedMessage = Union[OutboundMessage, SkippedMessage]


@dataclass
class DispatchResult:
    kind: str
    outcome: str
    establishment_id: Optional[int] = None
    number: Optional[str] = None
    detail: Optional[str] = None
    at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["at"] = self.at.isoformat()
        return data


class NotificationDispatcher:
    """Sends messages through a WhatsAppGateway and records what happened."""

    def __init__(self, gateway: WhatsAppGateway | None = None, history_size: int = 100):
        self._gateway = gateway or WhatsAppGateway()
        self._counts: Counter[str] = Counter()
        self._recent: deque[DispatchResult] = deque(maxlen=history_size)
        self._lock = threading.Lock()

    async def deliver(self, message: OutboundMessage) -> DispatchResult:
        """Send one message. Never raises."""
        try:
            status_code = await self._gateway.send_text(message.credentials, message.number, message.text)
        except GatewayError as e:
            logger.error(
                "Notification failed",
                kind=message.kind,
                establishment_id=message.establishment_id,
                number=mask_phone(message.number),
                error=str(e),
            )
            return self._record(message, DispatchOutcome.FAILED, str(e))
        except Exception as e:
            logger.error(
                "Notification failed unexpectedly",
                kind=message.kind,
                establishment_id=message.establishment_id,
                error=str(e),
                exc_info=True,
            )
            return self._record(message, DispatchOutcome.FAILED, str(e))

        logger.info(
            "Notification sent",
            kind=message.kind,
            establishment_id=message.establishment_id,
            number=mask_phone(message.number),
        )
        return self._record(message, DispatchOutcome.SENT, f"HTTP {status_code}")

    def skip(self, skipped: SkippedMessage) -> DispatchResult:
        logger.debug(
            "Notification skipped",
            kind=skipped.kind,
            establishment_id=skipped.establishment_id,
            reason=skipped.reason,
        )
        result = DispatchResult(
            kind=skipped.kind,
            outcome=DispatchOutcome.SKIPPED,
            establishment_id=skipped.establishment_id,
            detail=skipped.reason,
        )
        self._store(result)
        return result

    async def dispatch(self, planned: PlannedMessage) -> DispatchResult:
        """Deliver or record the skip, whichever the plan says."""
        if isinstance(planned, SkippedMessage):
            return self.skip(planned)
        return await self.deliver(planned)

    def schedule(self, background_tasks: BackgroundTasks, planned: PlannedMessage) -> None:
        """Queue delivery to run after the HTTP response is sent."""
        if isinstance(planned, SkippedMessage):
            self.skip(planned)
        else:
            background_tasks.add_task(self.deliver, planned)

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "counts": {outcome: self._counts[outcome] for outcome in DispatchOutcome.ALL},
                "recent": [result.to_dict() for result in self._recent],
            }

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._recent.clear()

    def _record(self, message: OutboundMessage, outcome: str, detail: str) -> DispatchResult:
        result = DispatchResult(
            kind=message.kind,
            outcome=outcome,
            establishment_id=message.establishment_id,
            number=mask_phone(message.number),
            detail=detail,
        )
        self._store(result)
        return result

    def _store(self, result: DispatchResult) -> None:
        with self._lock:
            self._counts[result.outcome] += 1
            self._recent.append(result)


_dispatcher: NotificationDispatcher | None = None


def get_notification_dispatcher() -> NotificationDispatcher:
    """Process-wide dispatcher (FastAPI dependency)."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = NotificationDispatcher()
    return _dispatcher
