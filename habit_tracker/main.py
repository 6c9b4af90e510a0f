"""
Entry point: configure logging, open the database and run the scheduler.
"""
import logging
import time
from typing import Optional

from sqlalchemy.orm import sessionmaker

from habit_tracker import config
from habit_tracker.database import Base, SessionLocal, engine, make_engine
from habit_tracker import models  # Import all models to register them with Base
from habit_tracker.repositories.snapshot_repository import SqlSnapshotStore
from habit_tracker.services.habit_store import HabitStore
from habit_tracker.services.scheduler_service import start_scheduler, stop_scheduler
from habit_tracker.services.tracker_service import TrackerService

logger = logging.getLogger("habit_tracker")


def create_store(database_url: Optional[str] = None, clock=None) -> HabitStore:
    """
    Create tables, open the SQL snapshot store and load the snapshot.

    Args:
        database_url: SQLAlchemy URL, configured database when omitted
        clock: Object with now() returning a local datetime

    Returns:
        Loaded HabitStore
    """
    if database_url:
        bind = make_engine(database_url)
        session_factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
    else:
        bind = engine
        session_factory = SessionLocal

    Base.metadata.create_all(bind=bind)
    store = HabitStore(SqlSnapshotStore(session_factory, key=config.SNAPSHOT_KEY), clock=clock)
    store.load()
    return store


def main():
    log_path = config.setup_logging()
    store = create_store()
    logger.info(f"Habit tracker started. Logging to: {log_path}")
    logger.info(f"Today: {TrackerService(store).get_today_summary().status_text()}")

    start_scheduler(store)
    try:
        while True:
            time.sleep(60)
    except KeyboardInterrupt:
        logger.info("Shutting down habit tracker")
    finally:
        stop_scheduler()


if __name__ == "__main__":
    main()
