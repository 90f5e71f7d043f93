"""Evaluation data types.

Dataclasses:
    - EvaluationRequest: What to evaluate in one run
    - EvaluationResult: Outcome for a single rule in a run (never persisted)
    - EvaluationSummary: Aggregate counts for a run
    - EvaluationResponse: Full outcome of a run
    - EngineStatistics: Cumulative in-process counters across runs

Enums:
    - TriggerOutcome: Whether the trigger created an alert
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

# Reasons reported on results that did not fire
REASON_COOLDOWN = "cooldown"
REASON_METRIC_UNAVAILABLE = "metric unavailable"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


def enum_value(value: object) -> str:
    """Plain string for a str-Enum member or a raw string loaded from the store."""
    return value.value if isinstance(value, Enum) else str(value)


class TriggerOutcome(str, Enum):
    """Result of asking the trigger to raise an alert."""

    CREATED = "created"
    ALREADY_ACTIVE = "already_active"
    RATE_LIMITED = "rate_limited"


@dataclass(frozen=True)
class EvaluationRequest:
    """Selects the rules for one evaluation run.

    force and source are only echoed into logs.
    """

    rule_id: str | None = None
    team_id: str | None = None
    force: bool = False
    source: str = "webhook"


@dataclass
class EvaluationResult:
    """Outcome of evaluating one rule.

    Attributes:
        success: False when the metric was unavailable or evaluation failed
        rule_id: Rule identifier
        rule_name: Rule name
        triggered: Whether the threshold condition held (not whether a new
                   alert row was written)
        metric_value: Resolved metric value, None if unavailable
        threshold_value: Rule threshold at evaluation time
        threshold_operator: Rule operator at evaluation time
        severity: Rule severity at evaluation time
        reason: None, REASON_COOLDOWN, REASON_METRIC_UNAVAILABLE, or an error message
        evaluation_time_ms: Wall-clock time spent on this rule
        alert_created: Whether this evaluation wrote a new alert
    """

    success: bool
    rule_id: str
    rule_name: str
    triggered: bool
    metric_value: float | None
    threshold_value: float
    threshold_operator: str
    severity: str
    reason: str | None = None
    evaluation_time_ms: float = 0.0
    alert_created: bool = False


@dataclass
class EvaluationSummary:
    """Aggregate counts for one run."""

    total_rules: int
    triggered_alerts: int
    evaluation_time_ms: float


@dataclass
class EvaluationResponse:
    """Full outcome of one evaluation run.

    success is False only when the rule set itself could not be loaded;
    individual rule failures are reported on their results.
    """

    success: bool
    message: str
    results: list[EvaluationResult]
    summary: EvaluationSummary
    timestamp: datetime


@dataclass
class EngineStatistics:
    """Cumulative counters over the lifetime of an EvaluationService."""

    runs: int = 0
    rules_evaluated: int = 0
    alerts_triggered: int = 0
    alerts_created: int = 0
    evaluation_errors: int = 0
    average_evaluation_time_ms: float = 0.0
    last_evaluation_at: datetime | None = None
    started_at: datetime = field(default_factory=utc_now)
