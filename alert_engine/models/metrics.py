"""Metric source tables read by the resolver."""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from alert_engine.db.database import Base


class PipelineEventStatus:
    """Known outcome values of a pipeline event."""

    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


# Outcomes that count toward the error rate
FAILURE_STATUSES: frozenset[str] = frozenset(
    {PipelineEventStatus.FAILED, PipelineEventStatus.TIMEOUT}
)

# SQLite only autoincrements INTEGER PRIMARY KEY columns
_PK_TYPE = BigInteger().with_variant(Integer, "sqlite")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PipelineEvent(Base):
    """One processed unit of the embedding pipeline."""

    __tablename__ = "embedding_performance_metrics"
    __table_args__ = (Index("idx_pipeline_events_team_created", "team_id", "created_at"),)

    id: Mapped[int] = mapped_column(_PK_TYPE, primary_key=True, autoincrement=True)
    team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[str] = mapped_column(String(20))
    total_duration_ms: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class PerformanceMetric(Base):
    """A single named performance sample."""

    __tablename__ = "performance_metrics"
    __table_args__ = (Index("idx_performance_metrics_name_created", "metric_name", "created_at"),)

    id: Mapped[int] = mapped_column(_PK_TYPE, primary_key=True, autoincrement=True)
    metric_name: Mapped[str] = mapped_column(String(100))
    metric_value: Mapped[float] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
