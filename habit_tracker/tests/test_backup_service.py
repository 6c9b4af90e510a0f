"""
Tests for backup_service.

Tests cover:
1. Backup creation and records
2. Retention cleanup
3. Restore and delete
"""
import json
import pytest
from pathlib import Path

from habit_tracker.constants import BACKUP_TYPE_MANUAL
from habit_tracker.models import Backup
from habit_tracker.services import backup_service


class TestCreateBackup:
    """Tests for create_backup"""

    def test_writes_export_file(self, db_session, store, daily_habit, tmp_path):
        backup = backup_service.create_backup(db_session, store, BACKUP_TYPE_MANUAL, backup_dir=str(tmp_path))

        assert backup is not None
        assert backup.backup_type == BACKUP_TYPE_MANUAL
        assert backup.filename.startswith("habit-tracker-backup-manual-")
        assert backup.size_bytes > 0
        payload = json.loads(Path(backup.filepath).read_text(encoding="utf-8"))
        assert payload["habits"][0]["name"] == "Run"

    def test_creates_missing_directory(self, db_session, store, tmp_path):
        target = tmp_path / "nested" / "dir"

        backup = backup_service.create_backup(db_session, store, backup_dir=str(target))

        assert Path(backup.filepath).parent == target

    def test_filesystem_error_returns_none(self, db_session, store, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")

        backup = backup_service.create_backup(db_session, store, backup_dir=str(blocker / "sub"))

        assert backup is None
        assert db_session.query(Backup).count() == 0

    def test_keeps_newest_backups(self, db_session, store, tmp_path):
        created = [
            backup_service.create_backup(db_session, store, backup_dir=str(tmp_path), keep_count=2)
            for _ in range(3)
        ]

        remaining = backup_service.get_all_backups(db_session)

        assert [b.id for b in remaining] == [created[2].id, created[1].id]
        assert len(list(tmp_path.iterdir())) == 2


class TestRestoreAndDelete:
    """Tests for restore_backup and delete_backup"""

    def test_restore_replaces_snapshot(self, db_session, store, daily_habit, tmp_path):
        backup = backup_service.create_backup(db_session, store, backup_dir=str(tmp_path))
        store.delete_habit(daily_habit.id)

        assert backup_service.restore_backup(db_session, store, backup.id) is True
        assert store.get_habit(daily_habit.id) is not None

    def test_restore_rejected_payload(self, db_session, store, daily_habit, tmp_path):
        backup = backup_service.create_backup(db_session, store, backup_dir=str(tmp_path))
        Path(backup.filepath).write_text("{broken", encoding="utf-8")

        assert backup_service.restore_backup(db_session, store, backup.id) is False
        assert store.get_habit(daily_habit.id) is not None

    def test_restore_missing_file(self, db_session, store, tmp_path):
        backup = backup_service.create_backup(db_session, store, backup_dir=str(tmp_path))
        Path(backup.filepath).unlink()

        assert backup_service.restore_backup(db_session, store, backup.id) is False

    def test_restore_unknown_id(self, db_session, store):
        assert backup_service.restore_backup(db_session, store, 999) is False

    def test_delete_removes_file_and_record(self, db_session, store, tmp_path):
        backup = backup_service.create_backup(db_session, store, backup_dir=str(tmp_path))
        path = Path(backup.filepath)

        assert backup_service.delete_backup(db_session, backup.id) is True
        assert not path.exists()
        assert backup_service.get_backup_by_id(db_session, backup.id) is None
        assert backup_service.delete_backup(db_session, backup.id) is False
