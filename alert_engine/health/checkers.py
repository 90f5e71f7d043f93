"""Health probes for the evaluation engine's dependencies.

probe_latency_ms is shared with the system_health metric source, so the
api_response_time metric and the health endpoint measure the same thing.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Protocol

from alert_engine.db.repositories.base import BaseRepository
from alert_engine.health.models import ComponentStatus, ProbeResult


class HealthChecker(Protocol):
    """Anything that can probe one dependency."""

    async def check(self) -> ProbeResult: ...


async def probe_latency_ms(probe: Callable[[], Awaitable[object]], timeout: float) -> float:
    """Time one call of `probe`, in milliseconds.

    Raises:
        TimeoutError: If the probe does not finish within `timeout` seconds
        Exception: Whatever the probe raises
    """
    start = time.perf_counter()
    await asyncio.wait_for(probe(), timeout=timeout)
    return (time.perf_counter() - start) * 1000


class DatabaseHealthChecker:
    """Round-trips a trivial query through a fresh session.

    DOWN on error or timeout, DEGRADED above degraded_latency_ms.
    """

    component = "database"

    def __init__(
        self,
        session_factory: Callable[[], object],
        timeout: float = 5.0,
        degraded_latency_ms: float = 1000.0,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout
        self._degraded_latency_ms = degraded_latency_ms

    async def check(self) -> ProbeResult:
        try:
            async with self._session_factory() as session:
                latency_ms = await probe_latency_ms(BaseRepository(session).ping, self._timeout)
        except TimeoutError:
            return self._result(ComponentStatus.DOWN, error=f"Probe timeout after {self._timeout}s")
        except Exception as e:
            return self._result(ComponentStatus.DOWN, error=str(e))

        if latency_ms > self._degraded_latency_ms:
            return self._result(
                ComponentStatus.DEGRADED,
                latency_ms=latency_ms,
                error=f"Slow response: {latency_ms:.0f}ms",
            )
        return self._result(ComponentStatus.HEALTHY, latency_ms=latency_ms)

    def _result(
        self,
        status: ComponentStatus,
        latency_ms: float | None = None,
        error: str | None = None,
    ) -> ProbeResult:
        return ProbeResult(
            component=self.component,
            status=status,
            checked_at=datetime.now(tz=timezone.utc),
            latency_ms=latency_ms,
            error=error,
        )
