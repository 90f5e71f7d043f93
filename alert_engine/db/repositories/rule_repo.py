"""Repository for AlertRule reads."""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select, update

from alert_engine.db.repositories.base import BaseRepository
from alert_engine.models.alert_rule import AlertRule

logger = logging.getLogger(__name__)


class AlertRuleRepository(BaseRepository):
    """Repository for alert rule database operations."""

    async def list_enabled(self, team_id: str | None = None) -> list[AlertRule]:
        """List enabled rules, optionally restricted to one team."""
        query = select(AlertRule).where(AlertRule.enabled.is_(True))
        if team_id is not None:
            query = query.where(AlertRule.team_id == team_id)
        result = await self.session.execute(query.order_by(AlertRule.created_at))
        return list(result.scalars().all())

    async def get_enabled(self, rule_id: str | uuid.UUID) -> AlertRule | None:
        """Get a rule by ID, or None if it is missing or disabled."""
        try:
            key = rule_id if isinstance(rule_id, uuid.UUID) else uuid.UUID(str(rule_id))
        except ValueError:
            logger.warning("Malformed rule id %r", rule_id)
            return None

        result = await self.session.execute(
            select(AlertRule).where(AlertRule.id == key, AlertRule.enabled.is_(True))
        )
        return result.scalar_one_or_none()

    async def mark_evaluated(self, rule_id: uuid.UUID, evaluated_at: datetime) -> None:
        """Stamp the time a rule was last evaluated."""
        await self.session.execute(
            update(AlertRule).where(AlertRule.id == rule_id).values(last_evaluated_at=evaluated_at)
        )
        await self.session.commit()
