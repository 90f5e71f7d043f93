"""EvaluationService module for running alert rule evaluations.

This module provides the EvaluationService class - the entry point for
evaluating alert rules. An external scheduler or webhook calls
run_evaluation(); the service resolves the rule set, evaluates every rule
concurrently and reports one result per rule.

Per rule the sequence is:
1. Resolve the metric (unavailable -> failed result, nothing else checked)
2. Check cooldown (suppressed -> successful result with reason "cooldown")
3. Evaluate the threshold condition
4. If the condition holds, ask the trigger for an alert (deduplicated and
   capped per hour)

A failure in one rule is recorded on that rule's result and never stops the
others. Only failing to load the rule set fails the whole run.

Usage:
    from alert_engine.alerts.service import EvaluationService

    service = EvaluationService(session_factory=async_session)
    response = await service.run_evaluation(EvaluationRequest(team_id="team-1"))
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import replace

from sqlalchemy.ext.asyncio import AsyncSession

from alert_engine.alerts.conditions import evaluate
from alert_engine.alerts.cooldown import CooldownGate
from alert_engine.alerts.metrics import MetricHandler, MetricResolver
from alert_engine.alerts.models import (
    REASON_COOLDOWN,
    REASON_METRIC_UNAVAILABLE,
    Clock,
    EngineStatistics,
    EvaluationRequest,
    EvaluationResponse,
    EvaluationResult,
    EvaluationSummary,
    TriggerOutcome,
    enum_value,
    utc_now,
)
from alert_engine.alerts.trigger import AlertTrigger
from alert_engine.db.repositories.alert_repo import AlertRepository
from alert_engine.db.repositories.rule_repo import AlertRuleRepository
from alert_engine.models.alert_rule import AlertRule

logger = logging.getLogger(__name__)


class EvaluationService:
    """Evaluates alert rules and raises alerts for rules that fire.

    Features:
    - Rule set by rule id, by team, or all enabled rules
    - Concurrent per-rule evaluation bounded by max_concurrency
    - One database session per rule
    - Per-rule failure isolation
    - Cumulative statistics across runs

    Example:
        service = EvaluationService(session_factory=async_session, max_concurrency=5)
        response = await service.run_evaluation()
        print(response.summary.triggered_alerts)
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        *,
        max_concurrency: int = 5,
        clock: Clock = utc_now,
        probe_timeout: float = 5.0,
        triggered_by: str = "evaluation_service",
        sources: dict[str, MetricHandler] | None = None,
    ):
        """Initialize EvaluationService.

        Args:
            session_factory: Callable returning a new AsyncSession context manager
            max_concurrency: Maximum rules evaluated at once; match the
                             store's connection budget
            clock: Returns the current UTC time
            probe_timeout: Seconds allowed for on-demand health probes
            triggered_by: Mechanism recorded in created alerts' context
            sources: Metric handler registry override
        """
        self._session_factory = session_factory
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._clock = clock
        self._probe_timeout = probe_timeout
        self._triggered_by = triggered_by
        self._sources = sources
        self._stats = EngineStatistics(started_at=clock())

    async def run_evaluation(self, request: EvaluationRequest | None = None) -> EvaluationResponse:
        """Evaluate the rules selected by `request`.

        Args:
            request: Rule selection; defaults to all enabled rules

        Returns:
            EvaluationResponse with one result per evaluated rule
        """
        request = request or EvaluationRequest()
        start = time.perf_counter()

        logger.info(
            "Alert rule evaluation triggered (rule_id=%s, team_id=%s, force=%s, source=%s)",
            request.rule_id,
            request.team_id,
            request.force,
            request.source,
        )

        try:
            rules = await self._load_rules(request)
        except Exception as e:
            logger.error("Alert rule evaluation failed: %s", e)
            return EvaluationResponse(
                success=False,
                message=f"Alert evaluation failed: {e}",
                results=[],
                summary=EvaluationSummary(
                    total_rules=0,
                    triggered_alerts=0,
                    evaluation_time_ms=_elapsed_ms(start),
                ),
                timestamp=self._clock(),
            )

        results = list(await asyncio.gather(*[self.evaluate_rule(rule) for rule in rules]))

        triggered = sum(1 for r in results if r.triggered)
        elapsed_ms = _elapsed_ms(start)
        self._record_run(results, elapsed_ms)

        logger.info(
            "Alert evaluation completed (total_rules=%d, triggered=%d, time=%.1fms)",
            len(results),
            triggered,
            elapsed_ms,
        )

        return EvaluationResponse(
            success=True,
            message=f"Evaluated {len(results)} alert rules",
            results=results,
            summary=EvaluationSummary(
                total_rules=len(results),
                triggered_alerts=triggered,
                evaluation_time_ms=elapsed_ms,
            ),
            timestamp=self._clock(),
        )

    async def evaluate_rule(self, rule: AlertRule) -> EvaluationResult:
        """Evaluate one rule in its own session.

        Never raises for store or handler errors; they are reported on the
        returned result.
        """
        async with self._semaphore:
            start = time.perf_counter()
            base = EvaluationResult(
                success=False,
                rule_id=str(rule.id),
                rule_name=rule.name,
                triggered=False,
                metric_value=None,
                threshold_value=rule.threshold_value,
                threshold_operator=rule.threshold_operator,
                severity=enum_value(rule.severity),
            )

            try:
                async with self._session_factory() as session:
                    try:
                        result = await self._evaluate_in_session(session, rule, base)
                    except Exception as e:
                        logger.exception("Error evaluating rule %s (%s)", rule.id, rule.name)
                        await _safe_rollback(session)
                        result = replace(base, reason=f"Evaluation error: {e}")

                    await self._mark_evaluated(session, rule)
            except Exception as e:
                # Opening or closing the session failed
                logger.exception("Session error for rule %s (%s)", rule.id, rule.name)
                result = replace(base, reason=f"Evaluation error: {e}")

            result.evaluation_time_ms = _elapsed_ms(start)
            return result

    async def _evaluate_in_session(
        self, session: AsyncSession, rule: AlertRule, base: EvaluationResult
    ) -> EvaluationResult:
        resolver = MetricResolver(
            session,
            clock=self._clock,
            probe_timeout=self._probe_timeout,
            sources=self._sources,
        )
        metric_value = await resolver.resolve(rule)
        if metric_value is None:
            return replace(base, reason=REASON_METRIC_UNAVAILABLE)
        # Kept on the error result if a later step raises
        base.metric_value = metric_value

        alerts = AlertRepository(session)
        if await CooldownGate(alerts, clock=self._clock).in_cooldown(rule):
            return replace(base, success=True, metric_value=metric_value, reason=REASON_COOLDOWN)

        condition_met = evaluate(metric_value, rule.threshold_value, rule.threshold_operator)

        alert_created = False
        if condition_met:
            trigger = AlertTrigger(alerts, clock=self._clock, triggered_by=self._triggered_by)
            outcome = await trigger.trigger(rule, metric_value)
            alert_created = outcome == TriggerOutcome.CREATED

        return replace(
            base,
            success=True,
            triggered=condition_met,
            metric_value=metric_value,
            alert_created=alert_created,
        )

    async def _load_rules(self, request: EvaluationRequest) -> list[AlertRule]:
        async with self._session_factory() as session:
            repo = AlertRuleRepository(session)
            if request.rule_id:
                rule = await repo.get_enabled(request.rule_id)
                if rule is None:
                    logger.warning("Rule not found or disabled: %s", request.rule_id)
                    return []
                return [rule]
            return await repo.list_enabled(team_id=request.team_id)

    async def _mark_evaluated(self, session: AsyncSession, rule: AlertRule) -> None:
        try:
            await AlertRuleRepository(session).mark_evaluated(rule.id, self._clock())
        except Exception as e:
            logger.warning("Could not stamp last_evaluated_at for rule %s: %s", rule.id, e)
            await _safe_rollback(session)

    def _record_run(self, results: list[EvaluationResult], elapsed_ms: float) -> None:
        stats = self._stats
        stats.runs += 1
        stats.rules_evaluated += len(results)
        stats.alerts_triggered += sum(1 for r in results if r.triggered)
        stats.alerts_created += sum(1 for r in results if r.alert_created)
        stats.evaluation_errors += sum(
            1 for r in results if not r.success and r.reason != REASON_METRIC_UNAVAILABLE
        )
        # Running mean of per-run wall-clock time
        stats.average_evaluation_time_ms += (elapsed_ms - stats.average_evaluation_time_ms) / (
            stats.runs
        )
        stats.last_evaluation_at = self._clock()

    def get_statistics(self) -> EngineStatistics:
        """Snapshot of cumulative engine statistics."""
        return replace(self._stats)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


async def _safe_rollback(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except Exception as e:
        logger.warning("Session rollback failed: %s", e)
