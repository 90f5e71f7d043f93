"""Alert creation with per-rule deduplication and an hourly cap.

The trigger writes at most one unresolved alert per rule, and at most
max_alerts_per_hour alerts per rule in any trailing hour. The cooldown gate
separately suppresses re-firing right after an incident is resolved.

Usage:
    from alert_engine.alerts.trigger import AlertTrigger

    trigger = AlertTrigger(AlertRepository(session))
    outcome = await trigger.trigger(rule, 15.0)
"""

import logging
from datetime import timedelta
from typing import Any

from alert_engine.alerts.models import Clock, TriggerOutcome, enum_value, utc_now
from alert_engine.db.repositories.alert_repo import AlertRepository
from alert_engine.models.alert import Alert, AlertStatus
from alert_engine.models.alert_rule import AlertRule

logger = logging.getLogger(__name__)

# Span counted against a rule's max_alerts_per_hour
RATE_LIMIT_WINDOW = timedelta(hours=1)


def format_number(value: float) -> str:
    """Format a metric or threshold for alert text.

    Examples:
        >>> format_number(15.0)
        '15'
        >>> format_number(2.50)
        '2.5'
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def _with_unit(value: float, unit: str | None) -> str:
    text = format_number(value)
    return f"{text} {unit}" if unit else text


def build_title(rule: AlertRule) -> str:
    threshold = format_number(rule.threshold_value)
    return f"{rule.name} - Threshold {rule.threshold_operator} {threshold}"


def build_description(rule: AlertRule, value: float) -> str:
    return (
        f"Metric {rule.metric_name} is {_with_unit(value, rule.threshold_unit)}, "
        f"which {rule.threshold_operator} threshold of "
        f"{_with_unit(rule.threshold_value, rule.threshold_unit)}"
    )


class AlertTrigger:
    """Creates an alert for a rule unless one is already unresolved."""

    def __init__(
        self,
        repository: AlertRepository,
        *,
        clock: Clock = utc_now,
        triggered_by: str = "evaluation_service",
    ):
        """Initialize AlertTrigger.

        Args:
            repository: AlertRepository for reads and writes
            clock: Returns the current UTC time, used for created_at
            triggered_by: Mechanism recorded in the alert context
        """
        self._repo = repository
        self._clock = clock
        self._triggered_by = triggered_by

    async def trigger(self, rule: AlertRule, measured_value: float) -> TriggerOutcome:
        """Raise an alert for `rule` at `measured_value`.

        Returns:
            CREATED if a new alert row was written, ALREADY_ACTIVE if an
            active or acknowledged alert for the rule already exists,
            RATE_LIMITED if the rule already raised max_alerts_per_hour
            alerts in the last hour

        Raises:
            SQLAlchemyError: If the store read or write fails
        """
        existing = await self._repo.get_unresolved(rule.id)
        if existing:
            logger.debug(
                "Alert already open for rule %s (%s), skipping", rule.name, existing[0].id
            )
            return TriggerOutcome.ALREADY_ACTIVE

        fired_at = self._clock()
        recent = await self._repo.count_since(rule.id, fired_at - RATE_LIMIT_WINDOW)
        if recent >= rule.max_alerts_per_hour:
            logger.warning(
                "Rate limit reached for rule %s (%d alerts in the last hour, max %d), skipping",
                rule.name,
                recent,
                rule.max_alerts_per_hour,
            )
            return TriggerOutcome.RATE_LIMITED

        context: dict[str, Any] = {
            "rule_name": rule.name,
            "evaluation_window_minutes": rule.evaluation_window_minutes,
            "metric_source": rule.metric_source,
            "triggered_at": fired_at.isoformat(),
            "triggered_by": self._triggered_by,
        }

        alert = Alert(
            alert_rule_id=rule.id,
            title=build_title(rule),
            description=build_description(rule, measured_value),
            severity=enum_value(rule.severity),
            status=AlertStatus.ACTIVE,
            metric_name=rule.metric_name,
            metric_value=measured_value,
            threshold_value=rule.threshold_value,
            threshold_operator=rule.threshold_operator,
            context=context,
            team_id=rule.team_id,
            created_at=fired_at,
            updated_at=fired_at,
        )

        is_new, created = await self._repo.persist_alert(
            alert,
            history_metadata={
                "metric_value": measured_value,
                "threshold_value": rule.threshold_value,
                "evaluation_time": fired_at.isoformat(),
            },
        )
        if not is_new:
            return TriggerOutcome.ALREADY_ACTIVE

        logger.info("Alert triggered: %s (id=%s)", alert.title, created.id)
        return TriggerOutcome.CREATED
