"""Health monitoring initialization."""

import logging
from collections.abc import Callable

from alert_engine.api.health import set_health_monitor
from alert_engine.config import settings
from alert_engine.health.checkers import DatabaseHealthChecker
from alert_engine.health.monitor import HealthMonitor

logger = logging.getLogger(__name__)


def init_health_monitor(session_factory: Callable[[], object] | None = None) -> HealthMonitor:
    """Initialize the health monitor with the store checker.

    Args:
        session_factory: Session factory to probe; defaults to the app's
                         async_session

    Returns:
        Configured HealthMonitor instance
    """
    if session_factory is None:
        from alert_engine.db.database import async_session

        session_factory = async_session

    monitor = HealthMonitor(
        checkers=[
            DatabaseHealthChecker(
                session_factory, timeout=settings.health_probe_timeout_seconds
            ),
        ]
    )
    set_health_monitor(monitor)
    logger.info("Health monitor initialized")

    return monitor
