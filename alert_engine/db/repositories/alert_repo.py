"""Alert repository module for database operations.

This module provides the AlertRepository class for reading and persisting
rule alerts. Key features:

- Lookup of unresolved (active/acknowledged) alerts for deduplication
- Most-recent-alert lookup for cooldown checks
- Per-rule alert counts for the hourly cap
- Alert creation with a matching history row in one transaction
- Unique-index conflicts reported as duplicates instead of errors

Usage:
    from alert_engine.db.repositories.alert_repo import AlertRepository

    repo = AlertRepository(session)
    if not await repo.get_unresolved(rule.id):
        is_new, alert = await repo.persist_alert(alert)
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from alert_engine.db.repositories.base import BaseRepository
from alert_engine.models.alert import UNRESOLVED_STATUSES, Alert, AlertHistory, AlertStatus

logger = logging.getLogger(__name__)


class AlertRepository(BaseRepository):
    """Repository for alert database operations.

    The store carries a partial unique index allowing one unresolved alert
    per rule; a conflicting insert is rolled back and reported as not new.
    """

    async def get_unresolved(self, rule_id: uuid.UUID) -> list[Alert]:
        """Get active or acknowledged alerts for a rule."""
        result = await self.session.execute(
            select(Alert).where(
                Alert.alert_rule_id == rule_id,
                Alert.status.in_([s.value for s in UNRESOLVED_STATUSES]),
            )
        )
        return list(result.scalars().all())

    async def get_latest_since(self, rule_id: uuid.UUID, since: datetime) -> Alert | None:
        """Get the most recent alert for a rule created at or after `since`.

        Any status counts: a resolved alert still starts a cooldown.
        """
        result = await self.session.execute(
            select(Alert)
            .where(Alert.alert_rule_id == rule_id, Alert.created_at >= since)
            .order_by(Alert.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def count_since(self, rule_id: uuid.UUID, since: datetime) -> int:
        """Count alerts of any status created for a rule at or after `since`."""
        result = await self.session.execute(
            select(func.count())
            .select_from(Alert)
            .where(Alert.alert_rule_id == rule_id, Alert.created_at >= since)
        )
        return result.scalar_one()

    async def persist_alert(
        self,
        alert: Alert,
        *,
        history_metadata: dict[str, Any] | None = None,
    ) -> tuple[bool, Alert | None]:
        """Persist a new alert together with its "created" history row.

        Args:
            alert: The alert to insert
            history_metadata: Extra context stored on the history row

        Returns:
            Tuple of (is_new, alert) where:
                is_new: True if inserted, False if another unresolved alert
                        for the same rule won the unique index
                alert: The persisted alert, or None when not inserted
        """
        self.session.add(alert)
        try:
            await self.session.flush()
            self.session.add(
                AlertHistory(
                    alert_id=alert.id,
                    event_type="created",
                    event_description="Alert created by evaluation engine",
                    new_status=AlertStatus.ACTIVE.value,
                    event_metadata=history_metadata or {},
                )
            )
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if not _is_unresolved_conflict(e):
                raise
            logger.debug("Unresolved alert already exists for rule %s", alert.alert_rule_id)
            return (False, None)

        await self.session.refresh(alert)
        return (True, alert)

    async def get_alert(self, alert_id: uuid.UUID) -> Alert | None:
        """Get an alert by ID."""
        result = await self.session.execute(select(Alert).where(Alert.id == alert_id))
        return result.scalar_one_or_none()

    async def list_for_rule(self, rule_id: uuid.UUID) -> list[Alert]:
        """List all alerts for a rule, newest first."""
        result = await self.session.execute(
            select(Alert).where(Alert.alert_rule_id == rule_id).order_by(Alert.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_history(self, alert_id: uuid.UUID) -> list[AlertHistory]:
        """Get history rows for an alert, oldest first."""
        result = await self.session.execute(
            select(AlertHistory)
            .where(AlertHistory.alert_id == alert_id)
            .order_by(AlertHistory.created_at)
        )
        return list(result.scalars().all())


def _is_unresolved_conflict(error: IntegrityError) -> bool:
    """Check whether an IntegrityError came from the one-unresolved-per-rule index.

    PostgreSQL names the index; SQLite names the indexed column.
    """
    message = str(error.orig)
    return "uq_alerts_unresolved_per_rule" in message or "alerts.alert_rule_id" in message
