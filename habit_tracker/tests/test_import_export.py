"""
Tests for snapshot export and import.

Tests cover:
1. Export format
2. Import replacing state and default-filling older snapshots
3. Rejection of malformed payloads without state change
"""
import json
import pytest

from habit_tracker.repositories.snapshot_repository import MemorySnapshotStore
from habit_tracker.services.habit_store import HabitStore
from habit_tracker.tests.conftest import complete_days


@pytest.fixture
def populated_store(store):
    category = store.add_category("Health")
    habit = store.add_habit("Run", category_id=category.id, custom_days=None)
    complete_days(store, habit.id, ["2024-01-07"])
    store.add_freeze_day("2024-01-04", reason="Sick")
    store.award_badge(habit.id, "week")
    return store


class TestExport:
    """Tests for export_data"""

    def test_contains_all_collections_camel_case(self, populated_store):
        payload = json.loads(populated_store.export_data())

        assert set(payload) == {"habits", "logs", "categories", "freezeDays", "badges", "version"}
        assert payload["version"] == 2
        assert payload["logs"][0]["habitId"] == populated_store.data.habits[0].id
        assert "completedAt" in payload["logs"][0]
        assert payload["freezeDays"] == [{"date": "2024-01-04", "reason": "Sick"}]

    def test_export_import_preserves_state(self, populated_store, clock):
        exported = populated_store.export_data()
        other = HabitStore(MemorySnapshotStore(), clock=clock)

        assert other.import_data(exported) is True
        assert other.export_data() == exported
        assert other.get_badges()[0].type == "week"


class TestImport:
    """Tests for import_data"""

    def test_replaces_snapshot(self, populated_store):
        payload = {
            "habits": [{
                "id": "h1", "name": "Meditate", "frequency": "daily",
                "createdAt": "2023-01-01T00:00:00", "archived": False, "order": 1
            }],
            "logs": [{"date": "2023-12-31", "habitId": "h1", "completed": True}],
            "categories": [],
            "freezeDays": [],
            "badges": [],
            "version": 2,
        }

        assert populated_store.import_data(json.dumps(payload)) is True
        assert [h.name for h in populated_store.get_habits()] == ["Meditate"]
        assert populated_store.get_log("h1", "2023-12-31").completed is True
        assert populated_store.get_categories() == []

    def test_fills_missing_newer_fields(self, store, storage):
        old = {"habits": [], "logs": []}

        assert store.import_data(json.dumps(old)) is True
        assert store.data.categories == []
        assert store.data.freeze_days == []
        assert store.data.badges == []
        assert store.data.version == 2
        assert storage.save_count == 1

    def test_null_newer_fields_use_defaults(self, store):
        assert store.import_data('{"habits": [], "logs": [], "badges": null}') is True
        assert store.data.badges == []

    @pytest.mark.parametrize("text", [
        "not json",
        "",
        "[]",
        "42",
        '{"logs": []}',
        '{"habits": []}',
        '{"habits": null, "logs": []}',
        '{"habits": [{"name": "no id"}], "logs": []}',
        '{"habits": [], "logs": [{"date": "Jan 1", "habitId": "h", "completed": true}]}',
        '{"habits": [], "logs": [{"date": "2024-01-32", "habitId": "h", "completed": true}]}',
        '{"habits": [], "logs": [{"date": "2024-13-45", "habitId": "h", "completed": true}]}',
        '{"habits": [], "logs": [], "freezeDays": [{"date": "2023-02-29"}]}',
    ])
    def test_rejects_without_mutation(self, populated_store, storage, text):
        before = populated_store.export_data()
        saves = storage.save_count

        assert populated_store.import_data(text) is False
        assert populated_store.export_data() == before
        assert storage.save_count == saves
