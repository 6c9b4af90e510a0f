"""
Snapshot repository - durable storage for the habit tracker snapshot.
The store treats persistence as opaque: load the whole snapshot once,
save the whole snapshot after every mutation.
"""
import logging
from typing import Callable, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habit_tracker.constants import DEFAULT_SNAPSHOT_KEY
from habit_tracker.exceptions import StorageException
from habit_tracker.models import SnapshotRecord
from habit_tracker.schemas import HabitData

logger = logging.getLogger("habit_tracker.storage")


def serialize_snapshot(data: HabitData, indent: Optional[int] = None) -> str:
    """Render a snapshot as JSON with camelCase keys"""
    return data.model_dump_json(by_alias=True, exclude_none=True, indent=indent)


class SnapshotRepository:
    """Repository for SnapshotRecord data access"""

    @staticmethod
    def get_by_key(db: Session, key: str) -> Optional[SnapshotRecord]:
        """Get stored snapshot row by key"""
        return db.query(SnapshotRecord).filter(SnapshotRecord.key == key).first()

    @staticmethod
    def upsert(db: Session, key: str, payload: str, version: int) -> SnapshotRecord:
        """Create or replace the snapshot row for key"""
        record = SnapshotRepository.get_by_key(db, key)
        if record is None:
            record = SnapshotRecord(key=key, payload=payload, version=version)
            db.add(record)
        else:
            record.payload = payload
            record.version = version
        db.commit()
        db.refresh(record)
        return record


class SnapshotStore:
    """Durable snapshot store interface"""

    def load(self) -> Optional[HabitData]:
        raise NotImplementedError

    def save(self, data: HabitData) -> None:
        raise NotImplementedError


class MemorySnapshotStore(SnapshotStore):
    """
    In-process store. Keeps the serialized form so that later in-memory
    mutations never leak into what was saved.
    """

    def __init__(self, payload: Optional[str] = None):
        self.payload = payload
        self.save_count = 0

    def load(self) -> Optional[HabitData]:
        if self.payload is None:
            return None
        return HabitData.model_validate_json(self.payload)

    def save(self, data: HabitData) -> None:
        self.payload = serialize_snapshot(data)
        self.save_count += 1


class SqlSnapshotStore(SnapshotStore):
    """Snapshot stored as one JSON row in a SQLAlchemy database"""

    def __init__(self, session_factory: Callable[[], Session], key: str = DEFAULT_SNAPSHOT_KEY):
        self.session_factory = session_factory
        self.key = key
        self.repo = SnapshotRepository()

    def load(self) -> Optional[HabitData]:
        db = self.session_factory()
        try:
            record = self.repo.get_by_key(db, self.key)
            if record is None:
                logger.info(f"No stored snapshot for key '{self.key}'")
                return None
            return HabitData.model_validate_json(record.payload)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load snapshot '{self.key}': {e}")
            raise StorageException("load", str(e)) from e
        except ValidationError as e:
            logger.error(f"Stored snapshot '{self.key}' is corrupt: {e}")
            raise StorageException("load", str(e)) from e
        finally:
            db.close()

    def save(self, data: HabitData) -> None:
        db = self.session_factory()
        try:
            self.repo.upsert(db, self.key, serialize_snapshot(data), data.version)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to save snapshot '{self.key}': {e}")
            raise StorageException("save", str(e)) from e
        finally:
            db.close()
