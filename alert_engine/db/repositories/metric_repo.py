"""Repository for metric source reads."""

from datetime import datetime

from sqlalchemy import func, select

from alert_engine.db.repositories.base import BaseRepository
from alert_engine.models.alert import AlertNotification
from alert_engine.models.metrics import PerformanceMetric, PipelineEvent


class MetricRepository(BaseRepository):
    """Windowed reads over pipeline events, performance samples and notifications.

    A team_id of None means no team filter.
    """

    async def pipeline_status_counts(
        self, since: datetime, team_id: str | None = None
    ) -> dict[str, int]:
        """Count pipeline events per status created at or after `since`."""
        query = (
            select(PipelineEvent.status, func.count())
            .where(PipelineEvent.created_at >= since)
            .group_by(PipelineEvent.status)
        )
        if team_id is not None:
            query = query.where(PipelineEvent.team_id == team_id)
        result = await self.session.execute(query)
        return {status: count for status, count in result.all()}

    async def pipeline_average_duration(
        self, since: datetime, team_id: str | None = None
    ) -> float | None:
        """Mean total_duration_ms of events since `since`, None if no durations."""
        query = select(func.avg(PipelineEvent.total_duration_ms)).where(
            PipelineEvent.created_at >= since,
            PipelineEvent.total_duration_ms.is_not(None),
        )
        if team_id is not None:
            query = query.where(PipelineEvent.team_id == team_id)
        result = await self.session.execute(query)
        value = result.scalar()
        return float(value) if value is not None else None

    async def latest_performance_value(self, metric_name: str, since: datetime) -> float | None:
        """Value of the newest sample for `metric_name` at or after `since`."""
        result = await self.session.execute(
            select(PerformanceMetric.metric_value)
            .where(
                PerformanceMetric.metric_name == metric_name,
                PerformanceMetric.created_at >= since,
            )
            .order_by(PerformanceMetric.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def notification_status_counts(self, since: datetime) -> dict[str, int]:
        """Count alert notifications per delivery status created at or after `since`."""
        result = await self.session.execute(
            select(AlertNotification.delivery_status, func.count())
            .where(AlertNotification.created_at >= since)
            .group_by(AlertNotification.delivery_status)
        )
        return {status: count for status, count in result.all()}
