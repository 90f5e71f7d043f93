"""Runs registered health probes and folds them into one status."""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from alert_engine.health.checkers import HealthChecker
from alert_engine.health.models import ComponentStatus, ProbeResult, SystemHealth

logger = logging.getLogger(__name__)


class HealthMonitor:
    """Probes every checker concurrently; the worst status wins."""

    def __init__(self, checkers: Sequence[HealthChecker]) -> None:
        self._checkers = list(checkers)

    @property
    def checkers(self) -> list[HealthChecker]:
        return list(self._checkers)

    async def check_all(self) -> SystemHealth:
        """Run every checker; a checker that raises counts as DOWN."""
        outcomes = await asyncio.gather(
            *[checker.check() for checker in self._checkers],
            return_exceptions=True,
        )

        probes: list[ProbeResult] = []
        for checker, outcome in zip(self._checkers, outcomes):
            if isinstance(outcome, Exception):
                name = getattr(checker, "component", type(checker).__name__)
                logger.error("Health checker %s raised: %s", name, outcome)
                outcome = ProbeResult(
                    component=name,
                    status=ComponentStatus.DOWN,
                    checked_at=datetime.now(tz=timezone.utc),
                    error=f"Checker error: {outcome}",
                )
            probes.append(outcome)

        return SystemHealth(
            status=ComponentStatus.worst(p.status for p in probes),
            checked_at=datetime.now(tz=timezone.utc),
            probes=probes,
        )
