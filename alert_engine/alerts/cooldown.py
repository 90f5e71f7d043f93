"""Cooldown suppression for alert rules."""

import logging
from datetime import timedelta

from alert_engine.alerts.models import Clock, utc_now
from alert_engine.db.repositories.alert_repo import AlertRepository
from alert_engine.models.alert_rule import AlertRule

logger = logging.getLogger(__name__)


class CooldownGate:
    """Decides whether a rule fired too recently to report again.

    A rule is in cooldown while its newest alert, whatever its status, is
    younger than cooldown_minutes. A cooldown of zero never suppresses.
    """

    def __init__(self, repository: AlertRepository, *, clock: Clock = utc_now):
        self._repo = repository
        self._clock = clock

    async def in_cooldown(self, rule: AlertRule) -> bool:
        if not rule.cooldown_minutes or rule.cooldown_minutes <= 0:
            return False

        boundary = self._clock() - timedelta(minutes=rule.cooldown_minutes)
        latest = await self._repo.get_latest_since(rule.id, boundary)
        if latest is None:
            return False

        logger.debug(
            "Rule %s in cooldown (last alert %s, cooldown=%dm)",
            rule.id,
            latest.id,
            rule.cooldown_minutes,
        )
        return True
