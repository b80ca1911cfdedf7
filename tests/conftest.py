import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("SEND_EMAILS", "false")
os.environ.setdefault("APP_URL", "https://fairpass.test")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models
from app.core.rate_limit import InMemoryCounterStore, RateLimiter, get_rate_limiter
from app.core.security import create_scanner_token
from app.db.database import Base, get_db
from app.main import app
from app.services.registration_events import RegistrationEventBus, get_event_bus
from app.utils.time import utcnow

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


class RecordingBus(RegistrationEventBus):
    """Event bus that remembers everything published to it"""

    def __init__(self):
        super().__init__()
        self.published = []

    def publish(self, event, background_tasks=None):
        self.published.append(event)
        super().publish(event, background_tasks)


class FakeClock:
    def __init__(self, start=1_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(InMemoryCounterStore(), clock=clock)


@pytest.fixture
def client(session_factory, bus, limiter):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: bus
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_event(db):
    counter = {"n": 0}

    def _make_event(**overrides):
        counter["n"] += 1
        now = utcnow()
        values = {
            "title": f"Study Abroad Fair {counter['n']}",
            "slug": f"study-abroad-fair-{counter['n']}",
            "status": models.EventStatus.PUBLISHED.value,
            "start_date_time": now + timedelta(days=1),
            "end_date_time": now + timedelta(days=1, hours=6),
            "city": "Istanbul",
            "venue_name": "Congress Center",
        }
        values.update(overrides)
        event = models.Event(**values)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


def scanner_headers(event_id, operator_id="gate-1"):
    token = create_scanner_token(operator_id, event_id)["access_token"]
    return {"Authorization": f"Bearer {token}"}
