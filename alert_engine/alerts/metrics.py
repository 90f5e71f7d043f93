"""Metric resolution for alert rules.

Each metric source is a handler registered in METRIC_SOURCES, keyed by the
rule's metric_source string. Handlers receive the resolver, the rule and the
start of the evaluation window, and return a number or None.

None means "no value": an unknown source, an unknown metric name, or no
sample in the window. Those are configuration or data conditions and are
never raised. Store errors do propagate.

Usage:
    from alert_engine.alerts.metrics import MetricResolver

    resolver = MetricResolver(session)
    value = await resolver.resolve(rule)
"""

import logging
from collections.abc import Awaitable, Callable, Collection
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from alert_engine.alerts.models import Clock, utc_now
from alert_engine.db.repositories.metric_repo import MetricRepository
from alert_engine.health.checkers import probe_latency_ms
from alert_engine.models.alert import NotificationDeliveryStatus
from alert_engine.models.alert_rule import AlertRule, MetricSource
from alert_engine.models.metrics import FAILURE_STATUSES, PipelineEventStatus

logger = logging.getLogger(__name__)

MetricHandler = Callable[["MetricResolver", AlertRule, datetime], Awaitable[float | None]]

METRIC_SOURCES: dict[str, MetricHandler] = {}

# Placeholder values for health metrics that have no probe yet
HEALTH_PLACEHOLDERS: dict[str, float] = {
    "health_score": 85.0,
}


def register_source(source: MetricSource | str) -> Callable[[MetricHandler], MetricHandler]:
    """Register a handler for a metric source."""

    def decorator(handler: MetricHandler) -> MetricHandler:
        key = source.value if isinstance(source, MetricSource) else source
        METRIC_SOURCES[key] = handler
        return handler

    return decorator


def _percentage(counts: dict[str, int], statuses: Collection[str], *, empty: float) -> float:
    """Share of `counts` whose status is in `statuses`, as a percentage.

    `empty` is returned when nothing was counted.
    """
    total = sum(counts.values())
    if total == 0:
        return empty
    return sum(n for status, n in counts.items() if status in statuses) / total * 100


class MetricResolver:
    """Computes the current value of a rule's metric."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        clock: Clock = utc_now,
        probe_timeout: float = 5.0,
        sources: dict[str, MetricHandler] | None = None,
    ):
        """Initialize MetricResolver.

        Args:
            session: Session used for all metric reads
            clock: Returns the current UTC time; windows end at clock()
            probe_timeout: Seconds allowed for on-demand health probes
            sources: Handler registry, defaults to METRIC_SOURCES
        """
        self.metrics = MetricRepository(session)
        self.probe_timeout = probe_timeout
        self._clock = clock
        self._sources = METRIC_SOURCES if sources is None else sources

    async def resolve(self, rule: AlertRule) -> float | None:
        """Resolve the rule's metric over its evaluation window."""
        handler = self._sources.get(rule.metric_source)
        if handler is None:
            logger.warning("Unknown metric source %r (rule=%s)", rule.metric_source, rule.id)
            return None

        window_start = self._clock() - timedelta(minutes=rule.evaluation_window_minutes)
        value = await handler(self, rule, window_start)
        return float(value) if value is not None else None


@register_source(MetricSource.EMBEDDING_METRICS)
async def _pipeline_metric(
    resolver: MetricResolver, rule: AlertRule, window_start: datetime
) -> float | None:
    """Rates and durations over pipeline events.

    An empty window reports a healthy pipeline (100% success, 0% errors):
    no traffic is not a failure. A rule without a team aggregates all teams.
    """
    if rule.metric_name == "avg_duration":
        return await resolver.metrics.pipeline_average_duration(window_start, rule.team_id)

    if rule.metric_name not in ("success_rate", "error_rate"):
        logger.warning("Unknown pipeline metric %r (rule=%s)", rule.metric_name, rule.id)
        return None

    counts = await resolver.metrics.pipeline_status_counts(window_start, rule.team_id)
    if rule.metric_name == "success_rate":
        return _percentage(counts, {PipelineEventStatus.SUCCESS}, empty=100.0)
    return _percentage(counts, FAILURE_STATUSES, empty=0.0)


@register_source(MetricSource.PERFORMANCE_METRICS)
async def _performance_metric(
    resolver: MetricResolver, rule: AlertRule, window_start: datetime
) -> float | None:
    """Newest in-window sample of the named metric."""
    value = await resolver.metrics.latest_performance_value(rule.metric_name, window_start)
    if value is None:
        logger.debug("No %s sample since %s", rule.metric_name, window_start.isoformat())
    return value


@register_source(MetricSource.SYSTEM_HEALTH)
async def _system_health_metric(
    resolver: MetricResolver, rule: AlertRule, window_start: datetime
) -> float | None:
    """System-wide health metrics.

    api_response_time is measured now by probing the store. error_rate is the
    pipeline error rate across all teams, and cache_hit_rate the newest sample
    reported by the cache layer.
    """
    if rule.metric_name == "api_response_time":
        return await probe_latency_ms(resolver.metrics.ping, timeout=resolver.probe_timeout)

    if rule.metric_name == "error_rate":
        counts = await resolver.metrics.pipeline_status_counts(window_start)
        return _percentage(counts, FAILURE_STATUSES, empty=0.0)

    if rule.metric_name == "cache_hit_rate":
        return await resolver.metrics.latest_performance_value("cache_hit_rate", window_start)

    value = HEALTH_PLACEHOLDERS.get(rule.metric_name)
    if value is None:
        logger.warning("Unknown system health metric %r (rule=%s)", rule.metric_name, rule.id)
    return value


@register_source(MetricSource.NOTIFICATION_METRICS)
async def _notification_metric(
    resolver: MetricResolver, rule: AlertRule, window_start: datetime
) -> float | None:
    """Delivery rates over alert notifications, across all teams.

    An empty window reports 100% success and 0% failure.
    """
    if rule.metric_name not in ("notification_success_rate", "notification_failure_rate"):
        logger.warning("Unknown notification metric %r (rule=%s)", rule.metric_name, rule.id)
        return None

    counts = await resolver.metrics.notification_status_counts(window_start)
    if rule.metric_name == "notification_success_rate":
        return _percentage(counts, {NotificationDeliveryStatus.DELIVERED}, empty=100.0)
    return _percentage(counts, {NotificationDeliveryStatus.FAILED}, empty=0.0)
