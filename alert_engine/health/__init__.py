"""Store health monitoring package."""

from alert_engine.health.checkers import DatabaseHealthChecker, HealthChecker, probe_latency_ms
from alert_engine.health.models import ComponentStatus, ProbeResult, SystemHealth
from alert_engine.health.monitor import HealthMonitor

__all__ = [
    "ComponentStatus",
    "DatabaseHealthChecker",
    "HealthChecker",
    "HealthMonitor",
    "ProbeResult",
    "SystemHealth",
    "probe_latency_ms",
]
