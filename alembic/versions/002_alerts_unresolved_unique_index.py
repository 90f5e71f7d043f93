"""Allow at most one unresolved alert per rule

Revision ID: 002_alerts_unresolved_unique
Revises: 001_alerting
Create Date: 2026-10-13
"""

import sqlalchemy as sa
from alembic import op

revision = "002_alerts_unresolved_unique"
down_revision = "001_alerting"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Partial unique index: concurrent evaluations of the same rule cannot
    # both insert an active alert. The losing insert fails and is reported
    # as "already active".
    op.create_index(
        "uq_alerts_unresolved_per_rule",
        "alerts",
        ["alert_rule_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('active', 'acknowledged')"),
    )


def downgrade() -> None:
    op.drop_index("uq_alerts_unresolved_per_rule", table_name="alerts")
