"""
Dependency checks for the detailed health endpoint.

A check is a plain callable (sync or async) that raises when its dependency
is unavailable and may return a dict of details:

    def check_database():
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"type": "postgresql"}

    healthy, components = await run_checks({"database": check_database})
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from shared.config.logging import get_logger

logger = get_logger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
DEGRADED = "degraded"

DEFAULT_CHECK_TIMEOUT = 3.0


@dataclass
class ComponentHealth:
    name: str
    healthy: bool
    latency_ms: float
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": HEALTHY if self.healthy else UNHEALTHY,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.error:
            body["error"] = self.error
        if self.details:
            body["details"] = self.details
        return body


async def check_component(name: str, check: Callable[[], Any], timeout: float = DEFAULT_CHECK_TIMEOUT) -> ComponentHealth:
    """Run one check with a timeout. Never raises."""
    started = time.perf_counter()
    try:
        if inspect.iscoroutinefunction(check):
            details = await asyncio.wait_for(check(), timeout=timeout)
        else:
            # Blocking drivers run off the event loop
            details = await asyncio.wait_for(asyncio.to_thread(check), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Health check timed out", component=name, timeout=timeout)
        return ComponentHealth(name, False, _elapsed(started), error=f"timeout after {timeout}s")
    except Exception as exc:
        logger.warning("Health check failed", component=name, error=str(exc))
        return ComponentHealth(name, False, _elapsed(started), error=str(exc))

    return ComponentHealth(
        name,
        True,
        _elapsed(started),
        details=details if isinstance(details, dict) else {},
    )


async def run_checks(
    checks: dict[str, Callable[[], Any]],
    timeout: float = DEFAULT_CHECK_TIMEOUT,
) -> tuple[bool, dict[str, dict[str, Any]]]:
    """Run all checks concurrently. Returns (all healthy, per-component bodies)."""
    results = await asyncio.gather(*(check_component(name, check, timeout) for name, check in checks.items()))
    return all(r.healthy for r in results), {r.name: r.as_dict() for r in results}


def _elapsed(started: float) -> float:
    return (time.perf_counter() - started) * 1000
