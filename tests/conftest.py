from __future__ import annotations

import datetime as dt
import os
from typing import Generator

import pytest

os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.api.deps import get_clock, get_db, get_session_factory
from app.db.base import Base
from app.db.session import make_engine, make_session_factory
import app.models  # noqa: F401
from app.main import api
from app.services.events import event_service
from app.services.lifecycle import LifecycleScheduler
from app.services.registration import RegistrationGate

T0 = dt.datetime(2026, 3, 2, 14, 0, tzinfo=dt.timezone.utc)


class FakeClock:
    """Settable clock; services call it like ``utcnow``."""

    def __init__(self, now: dt.datetime = T0):
        self.now = now

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **delta) -> dt.datetime:
        self.now = self.now + dt.timedelta(**delta)
        return self.now


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    Base.metadata.create_all(eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(eng)
        eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def lifecycle(session_factory, clock) -> LifecycleScheduler:
    return LifecycleScheduler(session_factory, clock=clock)


@pytest.fixture
def make_event(db, clock):
    """Creates an event relative to the fake clock: ``starts_in``/``lasts`` in minutes."""

    def _make(*, starts_in: float = 60, lasts: float = 60, capacity=None, title="Weekly seminar"):
        start = clock() + dt.timedelta(minutes=starts_in)
        return event_service.create_event(
            db,
            {
                "title": title,
                "start_time": start,
                "end_time": start + dt.timedelta(minutes=lasts),
                "capacity": capacity,
            },
        )

    return _make


@pytest.fixture
def register(db, clock):
    gate = RegistrationGate(clock=clock)

    def _register(event, *student_ids):
        return [gate.register(db, event_id=event.id, student_id=sid, is_verified=True) for sid in student_ids]

    return _register


@pytest.fixture
def client(session_factory, clock) -> Generator[TestClient, None, None]:
    def _get_db():
        with session_factory() as session:
            yield session

    api.dependency_overrides[get_db] = _get_db
    api.dependency_overrides[get_session_factory] = lambda: session_factory
    api.dependency_overrides[get_clock] = lambda: clock
    # no context manager: startup (migrations, scheduler) stays off
    yield TestClient(api)
    api.dependency_overrides.clear()
