# alert_engine/api/health.py
"""Dependency health endpoint."""

from datetime import datetime

from fastapi import APIRouter, Response

from alert_engine.api.schemas import CamelModel
from alert_engine.health.monitor import HealthMonitor

router = APIRouter(prefix="/api/health", tags=["health"])


class ProbeResponse(CamelModel):
    component: str
    status: str
    latency_ms: float | None
    checked_at: datetime
    error: str | None


class HealthResponse(CamelModel):
    status: str
    healthy: bool
    checked_at: datetime
    probes: list[ProbeResponse]


_health_monitor: HealthMonitor | None = None


def get_health_monitor() -> HealthMonitor:
    """Global monitor; probes nothing until init_health_monitor runs."""
    global _health_monitor
    if _health_monitor is None:
        _health_monitor = HealthMonitor(checkers=[])
    return _health_monitor


def set_health_monitor(monitor: HealthMonitor | None) -> None:
    global _health_monitor
    _health_monitor = monitor


@router.get("/detailed", response_model=HealthResponse)
async def get_detailed_health(response: Response) -> HealthResponse:
    """Probe the store. 503 unless every probe is healthy."""
    health = await get_health_monitor().check_all()
    if not health.healthy:
        response.status_code = 503

    return HealthResponse(
        status=health.status.value,
        healthy=health.healthy,
        checked_at=health.checked_at,
        probes=[
            ProbeResponse(
                component=p.component,
                status=p.status.value,
                latency_ms=p.latency_ms,
                checked_at=p.checked_at,
                error=p.error,
            )
            for p in health.probes
        ],
    )
