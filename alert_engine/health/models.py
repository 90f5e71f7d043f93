"""Store health models."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ComponentStatus(str, Enum):
    """Status of a probed dependency, least to most severe (UNKNOWN aside)."""

    HEALTHY = "healthy"
    UNKNOWN = "unknown"
    DEGRADED = "degraded"
    DOWN = "down"

    @classmethod
    def worst(cls, statuses: Iterable["ComponentStatus"]) -> "ComponentStatus":
        """Most severe of `statuses`; nothing probed is UNKNOWN."""
        order = list(cls)
        found = list(statuses)
        if not found:
            return cls.UNKNOWN
        return max(found, key=order.index)


@dataclass
class ProbeResult:
    """Outcome of one timed probe.

    latency_ms is None when the probe did not complete; error then says why.
    """

    component: str
    status: ComponentStatus
    checked_at: datetime
    latency_ms: float | None = None
    error: str | None = None


@dataclass
class SystemHealth:
    """Folded result of every registered probe."""

    status: ComponentStatus
    checked_at: datetime
    probes: list[ProbeResult] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return self.status == ComponentStatus.HEALTHY
