from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime

from habit_tracker.database import Base


class SnapshotRecord(Base):
    __tablename__ = "snapshots"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, nullable=False, unique=True, index=True)
    payload = Column(Text, nullable=False)  # JSON document of the whole snapshot
    version = Column(Integer, default=2)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Backup(Base):
    __tablename__ = "backups"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    filepath = Column(String, nullable=False)
    size_bytes = Column(Integer, default=0)
    backup_type = Column(String, default="auto")  # auto or manual
    status = Column(String, default="completed")
    created_at = Column(DateTime, default=datetime.now)
