from alert_engine.db.repositories.alert_repo import AlertRepository
from alert_engine.db.repositories.metric_repo import MetricRepository
from alert_engine.db.repositories.rule_repo import AlertRuleRepository

__all__ = ["AlertRepository", "AlertRuleRepository", "MetricRepository"]
