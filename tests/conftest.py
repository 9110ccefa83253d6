"""
Pytest fixtures for the scheduling test suite.

Provides:
- A fresh in-memory SQLite record store per test (StaticPool keeps the
  single connection alive across sessions)
- A deterministic clock fixed on 2026-01-15
- A capturing event notifier
- A ready-to-use ProjectScheduleService
- Structured log capture
"""

import json
import logging
from datetime import date
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy import event
from sqlalchemy.orm import Session

from schedule_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from schedule_kernel.domain.clock import DeterministicClock
from schedule_kernel.events import DomainEvent, EventNotifier
from schedule_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from schedule_modules.project.service import ProjectScheduleService

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

TEST_TODAY = date(2026, 1, 15)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture schedule_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.calculate_critical_path(project_id)
            logs = captured_logs()
            assert any(r["message"] == "critical_path_committed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("schedule_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_engine():
    """A fresh in-memory SQLite database with every table created."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    s = get_session()
    yield s
    s.close()


@pytest.fixture
def statement_log(db_engine):
    """
    Record every SQL statement issued against the engine.

    Returns a list that grows as statements run; ``clear()`` it to start a
    fresh window.
    """
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement.strip().split(None, 1)[0].upper())

    event.listen(get_engine(), "before_cursor_execute", _record)
    yield statements
    event.remove(get_engine(), "before_cursor_execute", _record)


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


# Clock fixtures


@pytest.fixture
def deterministic_clock():
    """Clock fixed at noon UTC on 2026-01-15."""
    return DeterministicClock.on(TEST_TODAY)


# Event fixtures


class CapturingNotifier(EventNotifier):
    """EventNotifier that also keeps every published event."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[DomainEvent] = []

    def publish(self, event_type, payload=None):
        published = super().publish(event_type, payload)
        self.events.append(published)
        return published

    def of_type(self, event_type: str) -> list[DomainEvent]:
        return [e for e in self.events if e.event_type == event_type]


@pytest.fixture
def notifier() -> CapturingNotifier:
    return CapturingNotifier()


# Service fixtures


@pytest.fixture
def service(session, deterministic_clock, notifier) -> ProjectScheduleService:
    """Provide a ProjectScheduleService bound to the test session."""
    return ProjectScheduleService(
        session=session,
        clock=deterministic_clock,
        notifier=notifier,
    )


@pytest.fixture
def project(service, test_actor_id):
    """An active project with a 10,000 budget."""
    return service.create_project(
        "Riverside Clinic",
        status="active",
        start_date=date(2026, 1, 1),
        end_date=date(2026, 3, 31),
        budgeted_cost="10000",
        actor_id=test_actor_id,
    )
