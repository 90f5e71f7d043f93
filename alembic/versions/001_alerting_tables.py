"""Create alert_rules, alerts, alert_history, alert_notifications and metric source tables.

Revision ID: 001_alerting
Revises:
Create Date: 2026-10-12
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision = "001_alerting"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create alert_rules table
    op.create_table(
        "alert_rules",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.VARCHAR(255), nullable=False),
        sa.Column("description", sa.TEXT, nullable=True),
        sa.Column("enabled", sa.BOOLEAN, nullable=False, server_default=sa.true()),
        sa.Column("team_id", sa.VARCHAR(36), nullable=True),
        sa.Column("metric_source", sa.VARCHAR(100), nullable=False),
        sa.Column("metric_name", sa.VARCHAR(100), nullable=False),
        sa.Column("evaluation_window_minutes", sa.INTEGER, nullable=False, server_default="5"),
        sa.Column("threshold_value", sa.FLOAT, nullable=False),
        sa.Column("threshold_operator", sa.VARCHAR(10), nullable=False),
        sa.Column("threshold_unit", sa.VARCHAR(20), nullable=True),
        sa.Column("severity", sa.VARCHAR(20), nullable=False, server_default="medium"),
        sa.Column("cooldown_minutes", sa.INTEGER, nullable=False, server_default="15"),
        sa.Column("max_alerts_per_hour", sa.INTEGER, nullable=False, server_default="10"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("last_evaluated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint(
            "threshold_operator IN ('>', '<', '>=', '<=', '=', '!=')",
            name="ck_alert_rules_operator",
        ),
        sa.CheckConstraint(
            "severity IN ('critical', 'high', 'medium', 'low', 'info')",
            name="ck_alert_rules_severity",
        ),
        sa.CheckConstraint(
            "evaluation_window_minutes > 0",
            name="ck_alert_rules_window_positive",
        ),
        sa.CheckConstraint(
            "cooldown_minutes >= 0",
            name="ck_alert_rules_cooldown_non_negative",
        ),
        sa.CheckConstraint(
            "max_alerts_per_hour >= 1",
            name="ck_alert_rules_hourly_cap_positive",
        ),
    )

    op.create_index("ix_alert_rules_enabled", "alert_rules", ["enabled"])
    op.create_index("idx_alert_rules_team_enabled", "alert_rules", ["team_id", "enabled"])
    op.create_index("idx_alert_rules_metric", "alert_rules", ["metric_name", "metric_source"])

    # Create alerts table
    op.create_table(
        "alerts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "alert_rule_id",
            UUID(as_uuid=True),
            sa.ForeignKey("alert_rules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.VARCHAR(500), nullable=False),
        sa.Column("description", sa.TEXT, nullable=True),
        sa.Column("severity", sa.VARCHAR(20), nullable=False),
        sa.Column("status", sa.VARCHAR(20), nullable=False, server_default="active"),
        sa.Column("metric_name", sa.VARCHAR(100), nullable=False),
        sa.Column("metric_value", sa.FLOAT, nullable=True),
        sa.Column("threshold_value", sa.FLOAT, nullable=True),
        sa.Column("threshold_operator", sa.VARCHAR(10), nullable=True),
        sa.Column("context", JSONB, nullable=False, server_default="{}"),
        sa.Column("team_id", sa.VARCHAR(36), nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.CheckConstraint(
            "status IN ('active', 'acknowledged', 'resolved', 'suppressed', 'expired')",
            name="ck_alerts_status",
        ),
    )

    op.create_index("idx_alerts_rule_status", "alerts", ["alert_rule_id", "status"])
    op.create_index(
        "idx_alerts_rule_created",
        "alerts",
        ["alert_rule_id", sa.text("created_at DESC")],
    )

    # Create alert_history table
    op.create_table(
        "alert_history",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "alert_id",
            UUID(as_uuid=True),
            sa.ForeignKey("alerts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("event_type", sa.VARCHAR(50), nullable=False),
        sa.Column("event_description", sa.TEXT, nullable=True),
        sa.Column("new_status", sa.VARCHAR(20), nullable=True),
        sa.Column("metadata", JSONB, nullable=False, server_default="{}"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_index("ix_alert_history_alert_id", "alert_history", ["alert_id"])

    # Create alert_notifications table, written by the notification dispatcher
    op.create_table(
        "alert_notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "alert_id",
            UUID(as_uuid=True),
            sa.ForeignKey("alerts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("channel", sa.VARCHAR(50), nullable=True),
        sa.Column("delivery_status", sa.VARCHAR(50), nullable=False, server_default="pending"),
        sa.Column("error_message", sa.TEXT, nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_index("ix_alert_notifications_alert_id", "alert_notifications", ["alert_id"])
    op.create_index(
        "idx_alert_notifications_created",
        "alert_notifications",
        [sa.text("created_at DESC")],
    )

    # Metric sources, written by the pipeline and monitoring jobs
    op.create_table(
        "embedding_performance_metrics",
        sa.Column("id", sa.BIGINT, primary_key=True, autoincrement=True),
        sa.Column("team_id", sa.VARCHAR(36), nullable=True),
        sa.Column("status", sa.VARCHAR(20), nullable=False),
        sa.Column("total_duration_ms", sa.FLOAT, nullable=True),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_index(
        "idx_pipeline_events_team_created",
        "embedding_performance_metrics",
        ["team_id", sa.text("created_at DESC")],
    )

    op.create_table(
        "performance_metrics",
        sa.Column("id", sa.BIGINT, primary_key=True, autoincrement=True),
        sa.Column("metric_name", sa.VARCHAR(100), nullable=False),
        sa.Column("metric_value", sa.FLOAT, nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_index(
        "idx_performance_metrics_name_created",
        "performance_metrics",
        ["metric_name", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_performance_metrics_name_created", table_name="performance_metrics")
    op.drop_table("performance_metrics")

    op.drop_index("idx_pipeline_events_team_created", table_name="embedding_performance_metrics")
    op.drop_table("embedding_performance_metrics")

    op.drop_index("idx_alert_notifications_created", table_name="alert_notifications")
    op.drop_index("ix_alert_notifications_alert_id", table_name="alert_notifications")
    op.drop_table("alert_notifications")

    # Drop alert_history first (has FK to alerts)
    op.drop_index("ix_alert_history_alert_id", table_name="alert_history")
    op.drop_table("alert_history")

    op.drop_index("idx_alerts_rule_created", table_name="alerts")
    op.drop_index("idx_alerts_rule_status", table_name="alerts")
    op.drop_table("alerts")

    op.drop_index("idx_alert_rules_metric", table_name="alert_rules")
    op.drop_index("idx_alert_rules_team_enabled", table_name="alert_rules")
    op.drop_index("ix_alert_rules_enabled", table_name="alert_rules")
    op.drop_table("alert_rules")
