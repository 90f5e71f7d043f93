"""Evaluation service initialization.

This module provides functions to initialize and access the global
EvaluationService instance.

Usage:
    from alert_engine.alerts.setup import init_evaluation_service, get_evaluation_service

    # During startup:
    init_evaluation_service()

    # Later, anywhere in the app:
    service = get_evaluation_service()
    response = await service.run_evaluation()
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from alert_engine.alerts.service import EvaluationService
from alert_engine.config import settings

logger = logging.getLogger(__name__)

_evaluation_service: EvaluationService | None = None


def init_evaluation_service(
    session_factory: Callable[[], AsyncSession] | None = None,
) -> EvaluationService:
    """Initialize the evaluation service from settings.

    Args:
        session_factory: Session factory to use; defaults to the app's
                         async_session

    Returns:
        Configured EvaluationService instance
    """
    global _evaluation_service

    if session_factory is None:
        from alert_engine.db.database import async_session

        session_factory = async_session

    _evaluation_service = EvaluationService(
        session_factory=session_factory,
        max_concurrency=settings.evaluation_concurrency,
        probe_timeout=settings.health_probe_timeout_seconds,
        triggered_by=settings.alert_triggered_by,
    )
    logger.info(
        "EvaluationService initialized (concurrency=%d)", settings.evaluation_concurrency
    )
    return _evaluation_service


def get_evaluation_service() -> EvaluationService:
    """Get the global evaluation service, initializing it on first use."""
    if _evaluation_service is None:
        return init_evaluation_service()
    return _evaluation_service


def set_evaluation_service(service: EvaluationService | None) -> None:
    """Replace the global evaluation service (None resets it)."""
    global _evaluation_service
    _evaluation_service = service
