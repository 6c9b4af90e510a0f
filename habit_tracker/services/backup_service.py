"""
Backup service for the habit tracker snapshot.
Writes JSON exports to the backup directory and keeps a record of each one.
"""
import os
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habit_tracker import config
from habit_tracker.constants import BACKUP_FILENAME_PREFIX, BACKUP_TYPE_AUTO
from habit_tracker.models import Backup
from habit_tracker.services.habit_store import HabitStore

logger = logging.getLogger("habit_tracker.backup")


def get_backup_filepath(backup_type: str = BACKUP_TYPE_AUTO, backup_dir: Optional[str] = None) -> tuple[str, str]:
    """Generate backup filename and full path"""
    directory = backup_dir or config.BACKUP_DIR
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S-%f")
    filename = f"{BACKUP_FILENAME_PREFIX}-{backup_type}-{timestamp}.json"
    return filename, os.path.join(directory, filename)


def create_backup(
    db: Session,
    store: HabitStore,
    backup_type: str = BACKUP_TYPE_AUTO,
    backup_dir: Optional[str] = None,
    keep_count: Optional[int] = None
) -> Optional[Backup]:
    """
    Export the snapshot to a JSON file and record it.

    Args:
        db: Database session
        store: Store whose snapshot is exported
        backup_type: "auto" or "manual"
        backup_dir: Target directory (configured directory by default)
        keep_count: Number of backups to keep (configured count by default)

    Returns:
        Backup object if successful, None otherwise
    """
    filename, filepath = get_backup_filepath(backup_type, backup_dir)
    try:
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Creating backup: {filename}")
        Path(filepath).write_text(store.export_data(), encoding="utf-8")
        size_bytes = os.path.getsize(filepath)

        backup = Backup(
            filename=filename,
            filepath=filepath,
            size_bytes=size_bytes,
            backup_type=backup_type,
            status="completed"
        )
        db.add(backup)
        db.commit()
        db.refresh(backup)

        logger.info(f"✓ Backup created: {filename} ({size_bytes} bytes)")

    except OSError as e:
        logger.error(f"✗ Backup failed: {e}")
        return None
    except SQLAlchemyError as e:
        logger.error(f"✗ Backup record failed: {e}")
        db.rollback()
        return None

    cleanup_old_backups(db, keep_count if keep_count is not None else config.BACKUP_KEEP_COUNT)
    return backup


def cleanup_old_backups(db: Session, keep_count: int) -> int:
    """
    Remove backups beyond the newest keep_count.

    Returns:
        Number of backups removed
    """
    all_backups = db.query(Backup).order_by(Backup.created_at.desc(), Backup.id.desc()).all()
    removed = 0

    for backup in all_backups[keep_count:]:
        if os.path.exists(backup.filepath):
            try:
                os.remove(backup.filepath)
                logger.info(f"Deleted old backup file: {backup.filename}")
            except OSError as e:
                logger.error(f"Failed to delete backup file {backup.filename}: {e}")
        db.delete(backup)
        removed += 1

    db.commit()
    return removed


def get_all_backups(db: Session, limit: int = 50) -> List[Backup]:
    """Get all backups ordered by creation date (newest first)"""
    return db.query(Backup).order_by(Backup.created_at.desc(), Backup.id.desc()).limit(limit).all()


def get_backup_by_id(db: Session, backup_id: int) -> Optional[Backup]:
    """Get backup by ID"""
    return db.query(Backup).filter(Backup.id == backup_id).first()


def delete_backup(db: Session, backup_id: int) -> bool:
    """Delete a backup (both file and database record)"""
    backup = get_backup_by_id(db, backup_id)
    if not backup:
        return False

    filename = backup.filename
    if os.path.exists(backup.filepath):
        os.remove(backup.filepath)

    db.delete(backup)
    db.commit()

    logger.info(f"Deleted backup: {filename}")
    return True


def restore_backup(db: Session, store: HabitStore, backup_id: int) -> bool:
    """
    Replace the store's snapshot with a backup's contents.

    Returns:
        True if the backup was found, readable and accepted by import
    """
    backup = get_backup_by_id(db, backup_id)
    if not backup:
        return False

    try:
        text = Path(backup.filepath).read_text(encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to read backup {backup.filename}: {e}")
        return False

    restored = store.import_data(text)
    if restored:
        logger.info(f"Restored backup: {backup.filename}")
    else:
        logger.warning(f"Backup {backup.filename} was rejected by import")
    return restored
