"""Alert, AlertHistory and AlertNotification models."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from alert_engine.db.database import Base


class AlertStatus(str, Enum):
    """Lifecycle status of an alert.

    Only ACTIVE and ACKNOWLEDGED count as unresolved; they block new alerts
    for the same rule.
    """

    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    SUPPRESSED = "suppressed"
    EXPIRED = "expired"


UNRESOLVED_STATUSES: frozenset[AlertStatus] = frozenset(
    {AlertStatus.ACTIVE, AlertStatus.ACKNOWLEDGED}
)

_UNRESOLVED_PREDICATE = text("status IN ('active', 'acknowledged')")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Alert(Base):
    """An alert raised by a rule.

    Severity and threshold fields are snapshots taken at fire time, so later
    rule edits do not rewrite history.
    """

    __tablename__ = "alerts"
    __table_args__ = (
        Index("idx_alerts_rule_status", "alert_rule_id", "status"),
        Index("idx_alerts_rule_created", "alert_rule_id", "created_at"),
        # At most one unresolved alert per rule
        Index(
            "uq_alerts_unresolved_per_rule",
            "alert_rule_id",
            unique=True,
            postgresql_where=_UNRESOLVED_PREDICATE,
            sqlite_where=_UNRESOLVED_PREDICATE,
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    alert_rule_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("alert_rules.id", ondelete="CASCADE")
    )

    # Alert details
    title: Mapped[str] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str] = mapped_column(String(20))
    status: Mapped[AlertStatus] = mapped_column(String(20), default=AlertStatus.ACTIVE)

    # Metric snapshot
    metric_name: Mapped[str] = mapped_column(String(100))
    metric_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    threshold_value: Mapped[float | None] = mapped_column(Float, nullable=True)
    threshold_operator: Mapped[str | None] = mapped_column(String(10), nullable=True)

    context: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    team_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __init__(self, **kwargs):
        """Initialize Alert with defaults for optional fields."""
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("status", AlertStatus.ACTIVE)
        kwargs.setdefault("context", {})
        super().__init__(**kwargs)


class AlertHistory(Base):
    """Append-only record of events that happened to an alert."""

    __tablename__ = "alert_history"

    id: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    alert_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("alerts.id", ondelete="CASCADE"), index=True
    )
    event_type: Mapped[str] = mapped_column(String(50))
    event_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("event_metadata", {})
        super().__init__(**kwargs)


class NotificationDeliveryStatus:
    """Known delivery states of an alert notification."""

    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    RETRYING = "retrying"


class AlertNotification(Base):
    """One delivery attempt of an alert to a notification channel.

    Written by the notification dispatcher; the engine only reads delivery
    outcomes for the notification_metrics source.
    """

    __tablename__ = "alert_notifications"
    __table_args__ = (Index("idx_alert_notifications_created", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True), primary_key=True)
    alert_id: Mapped[uuid.UUID] = mapped_column(
        PGUUID(as_uuid=True), ForeignKey("alerts.id", ondelete="CASCADE"), index=True
    )
    channel: Mapped[str | None] = mapped_column(String(50), nullable=True)
    delivery_status: Mapped[str] = mapped_column(
        String(50), default=NotificationDeliveryStatus.PENDING
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __init__(self, **kwargs):
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("delivery_status", NotificationDeliveryStatus.PENDING)
        super().__init__(**kwargs)
