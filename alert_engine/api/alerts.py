# alert_engine/api/alerts.py
"""Alert evaluation API endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Response

from alert_engine.alerts.models import EvaluationRequest, EvaluationResponse
from alert_engine.alerts.service import EvaluationService
from alert_engine.alerts.setup import get_evaluation_service
from alert_engine.api.schemas import CamelModel


# Request schemas
class EvaluateRequest(CamelModel):
    """Request body for an evaluation run."""

    rule_id: str | None = None
    team_id: str | None = None
    force: bool = False
    source: str = "webhook"


# Response schemas
class EvaluationResultResponse(CamelModel):
    """Outcome for a single rule."""

    success: bool
    rule_id: str
    rule_name: str
    triggered: bool
    metric_value: float | None
    threshold_value: float
    threshold_operator: str
    severity: str
    reason: str | None
    evaluation_time_ms: float


class EvaluationSummaryResponse(CamelModel):
    """Aggregate counts for a run."""

    total_rules: int
    triggered_alerts: int
    evaluation_time_ms: float


class EvaluateResponse(CamelModel):
    """Response for an evaluation run."""

    success: bool
    message: str
    results: list[EvaluationResultResponse]
    summary: EvaluationSummaryResponse
    timestamp: datetime


class EngineStatisticsResponse(CamelModel):
    """Cumulative engine statistics."""

    runs: int
    rules_evaluated: int
    alerts_triggered: int
    alerts_created: int
    evaluation_errors: int
    average_evaluation_time_ms: float
    last_evaluation_at: datetime | None
    started_at: datetime


# Router
router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_rules(
    body: EvaluateRequest,
    response: Response,
    service: EvaluationService = Depends(get_evaluation_service),
) -> EvaluateResponse:
    """Evaluate alert rules.

    Evaluates one rule (ruleId), a team's rules (teamId) or every enabled
    rule. Returns 200 even when individual rules fail; 500 only when the
    rule set itself could not be loaded.
    """
    result = await service.run_evaluation(
        EvaluationRequest(
            rule_id=body.rule_id,
            team_id=body.team_id,
            force=body.force,
            source=body.source,
        )
    )

    if not result.success:
        response.status_code = 500

    return _to_response(result)


@router.get("/stats", response_model=EngineStatisticsResponse)
async def get_engine_stats(
    service: EvaluationService = Depends(get_evaluation_service),
) -> EngineStatisticsResponse:
    """Get cumulative statistics of the evaluation engine."""
    stats = service.get_statistics()
    return EngineStatisticsResponse(
        runs=stats.runs,
        rules_evaluated=stats.rules_evaluated,
        alerts_triggered=stats.alerts_triggered,
        alerts_created=stats.alerts_created,
        evaluation_errors=stats.evaluation_errors,
        average_evaluation_time_ms=stats.average_evaluation_time_ms,
        last_evaluation_at=stats.last_evaluation_at,
        started_at=stats.started_at,
    )


def _to_response(result: EvaluationResponse) -> EvaluateResponse:
    return EvaluateResponse(
        success=result.success,
        message=result.message,
        results=[
            EvaluationResultResponse(
                success=r.success,
                rule_id=r.rule_id,
                rule_name=r.rule_name,
                triggered=r.triggered,
                metric_value=r.metric_value,
                threshold_value=r.threshold_value,
                threshold_operator=r.threshold_operator,
                severity=r.severity,
                reason=r.reason,
                evaluation_time_ms=r.evaluation_time_ms,
            )
            for r in result.results
        ],
        summary=EvaluationSummaryResponse(
            total_rules=result.summary.total_rules,
            triggered_alerts=result.summary.triggered_alerts,
            evaluation_time_ms=result.summary.evaluation_time_ms,
        ),
        timestamp=result.timestamp,
    )
