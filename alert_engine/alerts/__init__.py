"""Alert rule evaluation package.

This package evaluates user-defined alert rules, including:
- Threshold condition evaluation
- Metric resolution per metric source
- Cooldown suppression
- Deduplicated alert creation
- EvaluationService as the main entry point
"""

from alert_engine.alerts.conditions import EQUALITY_EPSILON, OPERATORS, evaluate
from alert_engine.alerts.cooldown import CooldownGate
from alert_engine.alerts.metrics import (
    HEALTH_PLACEHOLDERS,
    METRIC_SOURCES,
    MetricResolver,
    register_source,
)
from alert_engine.alerts.models import (
    REASON_COOLDOWN,
    REASON_METRIC_UNAVAILABLE,
    EngineStatistics,
    EvaluationRequest,
    EvaluationResponse,
    EvaluationResult,
    EvaluationSummary,
    TriggerOutcome,
)
from alert_engine.alerts.service import EvaluationService
from alert_engine.alerts.setup import get_evaluation_service, init_evaluation_service
from alert_engine.alerts.trigger import AlertTrigger

__all__ = [
    # Conditions
    "EQUALITY_EPSILON",
    "OPERATORS",
    "evaluate",
    # Metrics
    "HEALTH_PLACEHOLDERS",
    "METRIC_SOURCES",
    "MetricResolver",
    "register_source",
    # Cooldown / trigger
    "AlertTrigger",
    "CooldownGate",
    "TriggerOutcome",
    # Models
    "EngineStatistics",
    "EvaluationRequest",
    "EvaluationResponse",
    "EvaluationResult",
    "EvaluationSummary",
    "REASON_COOLDOWN",
    "REASON_METRIC_UNAVAILABLE",
    # Service
    "EvaluationService",
    "get_evaluation_service",
    "init_evaluation_service",
]
