from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from alert_engine.alerts.service import EvaluationService
from alert_engine.alerts.setup import get_evaluation_service
from alert_engine.db.database import Base
from alert_engine.main import app
from alert_engine.models.alert import Alert, AlertNotification, AlertStatus
from alert_engine.models.alert_rule import AlertRule, MetricSource, Severity
from alert_engine.models.metrics import PerformanceMetric, PipelineEvent

FIXED_NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock; call it to read the current time."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite engine.

    A file (not :memory:) so every session opened during a test sees the
    same data; the evaluation service opens one session per rule.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'alerts.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Database session for unit tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def add_rule(session_factory):
    """Persist an AlertRule; keyword arguments override the defaults."""

    async def _add_rule(**overrides) -> AlertRule:
        fields = {
            "name": "High error rate",
            "metric_source": MetricSource.EMBEDDING_METRICS.value,
            "metric_name": "error_rate",
            "threshold_value": 10.0,
            "threshold_operator": ">",
            "threshold_unit": "%",
            "severity": Severity.HIGH,
            "evaluation_window_minutes": 60,
            "cooldown_minutes": 15,
            "team_id": None,
        }
        fields.update(overrides)
        rule = AlertRule(**fields)
        async with session_factory() as session:
            session.add(rule)
            await session.commit()
        return rule

    return _add_rule


@pytest.fixture
def add_pipeline_events(session_factory):
    """Persist pipeline events: add_pipeline_events(at, success=17, failed=3)."""

    async def _add(at: datetime, team_id: str | None = None, duration_ms=None, **counts):
        async with session_factory() as session:
            for status, count in counts.items():
                for _ in range(count):
                    session.add(
                        PipelineEvent(
                            team_id=team_id,
                            status=status,
                            total_duration_ms=duration_ms,
                            created_at=at,
                        )
                    )
            await session.commit()

    return _add


@pytest.fixture
def add_performance_sample(session_factory):
    async def _add(metric_name: str, value: float, at: datetime) -> None:
        async with session_factory() as session:
            session.add(
                PerformanceMetric(metric_name=metric_name, metric_value=value, created_at=at)
            )
            await session.commit()

    return _add


@pytest.fixture
def add_notifications(session_factory):
    """Persist notifications for an alert: add_notifications(alert, at, delivered=9, failed=1)."""

    async def _add(alert: Alert, at: datetime, **counts) -> None:
        async with session_factory() as session:
            for status, count in counts.items():
                for _ in range(count):
                    session.add(
                        AlertNotification(alert_id=alert.id, delivery_status=status, created_at=at)
                    )
            await session.commit()

    return _add


@pytest.fixture
def add_alert(session_factory):
    """Persist an alert for a rule directly, bypassing the trigger."""

    async def _add(rule: AlertRule, created_at: datetime, status=AlertStatus.ACTIVE) -> Alert:
        alert = Alert(
            alert_rule_id=rule.id,
            title=f"{rule.name} - existing",
            severity="high",
            status=status,
            metric_name=rule.metric_name,
            metric_value=1.0,
            threshold_value=rule.threshold_value,
            threshold_operator=rule.threshold_operator,
            team_id=rule.team_id,
            created_at=created_at,
            updated_at=created_at,
        )
        async with session_factory() as session:
            session.add(alert)
            await session.commit()
        return alert

    return _add


@pytest.fixture
def evaluation_service(session_factory, clock):
    return EvaluationService(session_factory, clock=clock, probe_timeout=1.0)


@pytest_asyncio.fixture
async def client(evaluation_service):
    """HTTP client wired to the test evaluation service."""
    app.dependency_overrides[get_evaluation_service] = lambda: evaluation_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
