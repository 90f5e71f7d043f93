"""Tests for AlertRepository."""

import uuid
from datetime import timedelta

import pytest
import pytest_asyncio

from alert_engine.db.repositories.alert_repo import AlertRepository
from alert_engine.models.alert import Alert, AlertStatus


@pytest_asyncio.fixture
async def repo(db_session):
    """Create repository with test session."""
    return AlertRepository(db_session)


def new_alert(rule, clock, **kwargs) -> Alert:
    fields = {
        "alert_rule_id": rule.id,
        "title": "t",
        "severity": "high",
        "metric_name": rule.metric_name,
        "metric_value": 15.0,
        "created_at": clock(),
        "updated_at": clock(),
    }
    fields.update(kwargs)
    return Alert(**fields)


@pytest.mark.asyncio
async def test_get_unresolved_returns_active_and_acknowledged(repo, add_rule, add_alert, clock):
    """Should return only active and acknowledged alerts."""
    rule = await add_rule()
    await add_alert(rule, clock(), status=AlertStatus.RESOLVED)
    await add_alert(rule, clock(), status=AlertStatus.EXPIRED)
    acked = await add_alert(rule, clock(), status=AlertStatus.ACKNOWLEDGED)

    unresolved = await repo.get_unresolved(rule.id)

    assert [a.id for a in unresolved] == [acked.id]


@pytest.mark.asyncio
async def test_get_latest_since_picks_newest(repo, add_rule, add_alert, clock):
    """Should return the newest alert at or after the boundary."""
    rule = await add_rule()
    await add_alert(rule, clock() - timedelta(minutes=30), status=AlertStatus.RESOLVED)
    newest = await add_alert(rule, clock() - timedelta(minutes=10), status=AlertStatus.RESOLVED)

    latest = await repo.get_latest_since(rule.id, clock() - timedelta(hours=1))

    assert latest is not None
    assert latest.id == newest.id


@pytest.mark.asyncio
async def test_get_latest_since_none_before_boundary(repo, add_rule, add_alert, clock):
    """Should return None when every alert is older than the boundary."""
    rule = await add_rule()
    await add_alert(rule, clock() - timedelta(hours=2))

    assert await repo.get_latest_since(rule.id, clock() - timedelta(hours=1)) is None


@pytest.mark.asyncio
async def test_count_since_counts_every_status(repo, add_rule, add_alert, clock):
    """Should count alerts of any status at or after the boundary, for that rule only."""
    rule = await add_rule()
    other = await add_rule(name="Other")
    await add_alert(rule, clock() - timedelta(minutes=90), status=AlertStatus.RESOLVED)
    await add_alert(rule, clock() - timedelta(minutes=40), status=AlertStatus.RESOLVED)
    await add_alert(rule, clock() - timedelta(minutes=5))
    await add_alert(other, clock() - timedelta(minutes=5))

    assert await repo.count_since(rule.id, clock() - timedelta(hours=1)) == 2
    assert await repo.count_since(uuid.uuid4(), clock() - timedelta(hours=1)) == 0


@pytest.mark.asyncio
async def test_persist_alert_writes_history(repo, add_rule, clock):
    """Should insert the alert and a "created" history row."""
    rule = await add_rule()

    is_new, alert = await repo.persist_alert(
        new_alert(rule, clock), history_metadata={"metric_value": 15.0}
    )

    assert is_new is True
    assert alert is not None
    fetched = await repo.get_alert(alert.id)
    assert fetched is not None
    assert fetched.status == AlertStatus.ACTIVE
    history = await repo.get_history(alert.id)
    assert [h.event_type for h in history] == ["created"]
    assert history[0].event_metadata == {"metric_value": 15.0}


@pytest.mark.asyncio
async def test_persist_alert_conflict_is_not_new(repo, add_rule, add_alert, clock):
    """Should report a second unresolved alert for a rule as not new."""
    rule = await add_rule()
    await add_alert(rule, clock())

    is_new, alert = await repo.persist_alert(new_alert(rule, clock))

    assert is_new is False
    assert alert is None
    assert len(await repo.list_for_rule(rule.id)) == 1


@pytest.mark.asyncio
async def test_persist_alert_allowed_after_resolution(repo, add_rule, add_alert, clock):
    """Resolved alerts do not take part in the unique index."""
    rule = await add_rule()
    await add_alert(rule, clock(), status=AlertStatus.RESOLVED)

    is_new, _ = await repo.persist_alert(new_alert(rule, clock))

    assert is_new is True
    assert len(await repo.list_for_rule(rule.id)) == 2


@pytest.mark.asyncio
async def test_get_alert_missing(repo):
    """Should return None for an unknown id."""
    assert await repo.get_alert(uuid.uuid4()) is None
