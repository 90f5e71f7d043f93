"""Tests for alert evaluation API endpoints."""

from datetime import timedelta

import pytest

from alert_engine.db.repositories.rule_repo import AlertRuleRepository


class TestEvaluateEndpoint:
    """Tests for POST /api/alerts/evaluate."""

    @pytest.mark.asyncio
    async def test_evaluate_all_returns_camel_case(
        self, client, add_rule, add_pipeline_events, clock
    ):
        await add_pipeline_events(clock() - timedelta(minutes=10), success=17, failed=3)
        rule = await add_rule(name="Errors")

        response = await client.post("/api/alerts/evaluate", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Evaluated 1 alert rules"
        assert data["summary"] == {
            "totalRules": 1,
            "triggeredAlerts": 1,
            "evaluationTimeMs": data["summary"]["evaluationTimeMs"],
        }
        result = data["results"][0]
        assert result["ruleId"] == str(rule.id)
        assert result["ruleName"] == "Errors"
        assert result["triggered"] is True
        assert result["metricValue"] == pytest.approx(15.0)
        assert result["thresholdValue"] == 10.0
        assert result["thresholdOperator"] == ">"
        assert result["severity"] == "high"
        assert result["reason"] is None
        assert "evaluationTimeMs" in result
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_evaluate_single_rule(self, client, add_rule):
        target = await add_rule(name="Target")
        await add_rule(name="Other")

        response = await client.post("/api/alerts/evaluate", json={"ruleId": str(target.id)})

        assert response.status_code == 200
        assert [r["ruleName"] for r in response.json()["results"]] == ["Target"]

    @pytest.mark.asyncio
    async def test_evaluate_team(self, client, add_rule):
        await add_rule(name="Mine", team_id="team-a")
        await add_rule(name="Theirs", team_id="team-b")

        response = await client.post(
            "/api/alerts/evaluate",
            json={"teamId": "team-a", "force": True, "source": "scheduler"},
        )

        assert response.status_code == 200
        assert [r["ruleName"] for r in response.json()["results"]] == ["Mine"]

    @pytest.mark.asyncio
    async def test_unavailable_metric_is_reported_with_200(self, client, add_rule):
        await add_rule(name="Business", metric_source="business_metrics")

        response = await client.post("/api/alerts/evaluate", json={})

        assert response.status_code == 200
        result = response.json()["results"][0]
        assert result["success"] is False
        assert result["reason"] == "metric unavailable"
        assert result["metricValue"] is None

    @pytest.mark.asyncio
    async def test_load_failure_returns_500(self, client, monkeypatch):
        async def fail(self, team_id=None):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(AlertRuleRepository, "list_enabled", fail)

        response = await client.post("/api/alerts/evaluate", json={})

        assert response.status_code == 500
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Alert evaluation failed: database unavailable"
        assert data["results"] == []
        assert data["summary"]["totalRules"] == 0


class TestStatsEndpoint:
    """Tests for GET /api/alerts/stats."""

    @pytest.mark.asyncio
    async def test_stats_after_run(self, client, add_rule):
        await add_rule()
        await client.post("/api/alerts/evaluate", json={})

        response = await client.get("/api/alerts/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["runs"] == 1
        assert data["rulesEvaluated"] == 1
        assert data["lastEvaluationAt"] is not None
