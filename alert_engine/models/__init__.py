from alert_engine.models.alert import (
    UNRESOLVED_STATUSES,
    Alert,
    AlertHistory,
    AlertNotification,
    AlertStatus,
    NotificationDeliveryStatus,
)
from alert_engine.models.alert_rule import AlertRule, MetricSource, Severity, ThresholdOperator
from alert_engine.models.metrics import (
    FAILURE_STATUSES,
    PerformanceMetric,
    PipelineEvent,
    PipelineEventStatus,
)

__all__ = [
    "Alert",
    "AlertHistory",
    "AlertNotification",
    "AlertRule",
    "AlertStatus",
    "FAILURE_STATUSES",
    "MetricSource",
    "NotificationDeliveryStatus",
    "PerformanceMetric",
    "PipelineEvent",
    "PipelineEventStatus",
    "Severity",
    "ThresholdOperator",
    "UNRESOLVED_STATUSES",
]
