"""
Tests for snapshot storage.

Tests cover:
1. SQL snapshot store load/save
2. Storage failures
3. Memory store isolation
"""
import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from habit_tracker.exceptions import StorageException
from habit_tracker.models import SnapshotRecord
from habit_tracker.repositories.snapshot_repository import (
    MemorySnapshotStore, SnapshotRepository, SqlSnapshotStore,
)
from habit_tracker.schemas import HabitData
from habit_tracker.services.habit_store import HabitStore


class TestSqlSnapshotStore:
    """Tests for SqlSnapshotStore"""

    def test_load_empty_returns_none(self, session_factory):
        assert SqlSnapshotStore(session_factory).load() is None

    def test_store_round_trip(self, session_factory, clock):
        store = HabitStore(SqlSnapshotStore(session_factory), clock=clock)
        store.load()
        habit = store.add_habit("Run")
        store.toggle_habit(habit.id, "2024-01-07")
        store.add_freeze_day("2024-01-04")

        reloaded = HabitStore(SqlSnapshotStore(session_factory), clock=clock)
        reloaded.load()

        assert reloaded.get_habit(habit.id).name == "Run"
        assert reloaded.is_frozen("2024-01-04")
        assert reloaded.get_current_streak_with_freeze(habit.id) == 1

    def test_single_row_per_key(self, session_factory, db_session):
        storage = SqlSnapshotStore(session_factory)
        storage.save(HabitData())
        storage.save(HabitData())

        assert db_session.query(SnapshotRecord).count() == 1

    def test_keys_are_independent(self, session_factory):
        SqlSnapshotStore(session_factory, key="a").save(HabitData(version=2))

        assert SqlSnapshotStore(session_factory, key="b").load() is None
        assert SqlSnapshotStore(session_factory, key="a").load() is not None

    def test_corrupt_payload_raises(self, session_factory, db_session):
        SnapshotRepository.upsert(db_session, "default", '{"habits": "nope"}', 2)

        with pytest.raises(StorageException) as exc_info:
            SqlSnapshotStore(session_factory).load()

        assert exc_info.value.operation == "load"

    def test_database_error_on_save(self, session_factory):
        storage = SqlSnapshotStore(session_factory)

        with patch.object(
            SnapshotRepository, "upsert",
            side_effect=OperationalError("UPDATE", {}, Exception("locked"))
        ):
            with pytest.raises(StorageException) as exc_info:
                storage.save(HabitData())

        assert exc_info.value.operation == "save"


class TestMemorySnapshotStore:
    """Tests for MemorySnapshotStore"""

    def test_saved_snapshot_is_detached(self):
        storage = MemorySnapshotStore()
        data = HabitData()
        storage.save(data)
        data.version = 99

        assert storage.load().version == 2

    def test_seeded_payload(self):
        storage = MemorySnapshotStore('{"habits": [], "logs": []}')

        assert storage.load().badges == []
