"""
Shared fixtures for habit tracker tests.
"""
import pytest
from datetime import datetime
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habit_tracker.database import Base
from habit_tracker import models  # Register tables with Base
from habit_tracker.repositories.snapshot_repository import MemorySnapshotStore
from habit_tracker.services.habit_store import HabitStore
from habit_tracker.services.tracker_service import TrackerService


class FixedClock:
    """Clock frozen at a given local datetime"""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


def complete_days(store: HabitStore, habit_id: str, dates):
    """Mark each date as completed for the habit"""
    for day in dates:
        store.set_completion(habit_id, day, True)


@pytest.fixture
def clock():
    # Monday 2024-01-08, midday
    return FixedClock(datetime(2024, 1, 8, 12, 0, 0))


@pytest.fixture
def storage():
    return MemorySnapshotStore()


@pytest.fixture
def store(storage, clock):
    habit_store = HabitStore(storage, clock=clock)
    habit_store.load()
    return habit_store


@pytest.fixture
def tracker(store):
    return TrackerService(store)


@pytest.fixture
def daily_habit(store):
    return store.add_habit("Run", emoji="🏃")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()
