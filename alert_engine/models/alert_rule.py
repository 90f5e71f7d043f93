"""AlertRule model: a threshold condition over a named metric."""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from alert_engine.db.database import Base


class MetricSource(str, Enum):
    """Category of backing data a rule's metric is computed from.

    EMBEDDING_METRICS: pipeline-event rows aggregated over the window
    PERFORMANCE_METRICS: latest generic performance sample in the window
    SYSTEM_HEALTH: computed on demand by probing the store
    NOTIFICATION_METRICS: delivery outcomes of alert notifications in the window
    """

    EMBEDDING_METRICS = "embedding_metrics"
    PERFORMANCE_METRICS = "performance_metrics"
    SYSTEM_HEALTH = "system_health"
    NOTIFICATION_METRICS = "notification_metrics"


class ThresholdOperator(str, Enum):
    """Comparison operators allowed in a rule's threshold condition."""

    GT = ">"
    LT = "<"
    GTE = ">="
    LTE = "<="
    EQ = "="
    NEQ = "!="


class Severity(str, Enum):
    """Alert severity, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Ordinal rank: 1 is the most severe."""
        return list(Severity).index(self) + 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AlertRule(Base):
    """A configured threshold condition over a named metric.

    Authored externally. The evaluation engine only reads rules, except for
    stamping last_evaluated_at after each evaluation attempt.
    """

    __tablename__ = "alert_rules"
    __table_args__ = (
        Index("idx_alert_rules_team_enabled", "team_id", "enabled"),
        Index("idx_alert_rules_metric", "metric_name", "metric_source"),
    )

    id: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Metric
    # Stored as a plain string: rules with unknown sources must still load.
    metric_source: Mapped[str] = mapped_column(String(100))
    metric_name: Mapped[str] = mapped_column(String(100))
    evaluation_window_minutes: Mapped[int] = mapped_column(Integer, default=5)

    # Threshold
    threshold_value: Mapped[float] = mapped_column(Float)
    threshold_operator: Mapped[str] = mapped_column(String(10))
    threshold_unit: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Alerting
    severity: Mapped[Severity] = mapped_column(String(20), default=Severity.MEDIUM)
    cooldown_minutes: Mapped[int] = mapped_column(Integer, default=15)
    max_alerts_per_hour: Mapped[int] = mapped_column(Integer, default=10)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    last_evaluated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __init__(self, **kwargs):
        """Initialize AlertRule with defaults for optional fields."""
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("enabled", True)
        kwargs.setdefault("evaluation_window_minutes", 5)
        kwargs.setdefault("severity", Severity.MEDIUM)
        kwargs.setdefault("cooldown_minutes", 15)
        kwargs.setdefault("max_alerts_per_hour", 10)
        super().__init__(**kwargs)
