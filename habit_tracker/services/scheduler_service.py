"""
Background scheduler for automatic habit tracker jobs.
Handles:
- Daily snapshot backup
- Daily badge sweep over all active habits
"""
import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.exc import SQLAlchemyError

from habit_tracker import config
from habit_tracker.constants import BACKUP_TYPE_AUTO, BADGE_SWEEP_TIME
from habit_tracker.database import SessionLocal
from habit_tracker.exceptions import HabitTrackerException, ValidationException
from habit_tracker.services import backup_service
from habit_tracker.services.habit_store import HabitStore

logger = logging.getLogger("habit_tracker.scheduler")

scheduler = BackgroundScheduler()


def parse_time(time_str: str) -> tuple[int, int]:
    """
    Parse "HH:MM" into hour and minute.

    Raises:
        ValidationException: If the string is not a valid time of day
    """
    try:
        hour_str, minute_str = time_str.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError):
        raise ValidationException("time", f"expected HH:MM, got {time_str!r}")
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValidationException("time", f"out of range: {time_str}")
    return hour, minute


def run_auto_backup(store: HabitStore, session_factory=SessionLocal):
    """Job: export the snapshot to the backup directory"""
    db = session_factory()
    try:
        backup = backup_service.create_backup(db, store, backup_type=BACKUP_TYPE_AUTO)
        if backup:
            logger.info(f"Auto-backup successful: {backup.filename}")
        else:
            logger.error("Auto-backup failed")
    except SQLAlchemyError as e:
        logger.error(f"Scheduler Error (Backup): {e}")
    finally:
        db.close()


def run_badge_sweep(store: HabitStore) -> int:
    """
    Job: award milestone badges for every active habit.

    Returns:
        Number of badges awarded
    """
    awarded = 0
    try:
        for habit in store.get_habits():
            awarded += len(store.check_and_award_badges(habit.id))
    except HabitTrackerException as e:
        logger.error(f"Scheduler Error (Badges): {e}")
    if awarded:
        logger.info(f"Badge sweep awarded {awarded} badges")
    return awarded


def start_scheduler(store: HabitStore, backup_time: Optional[str] = None):
    """Start the scheduler with the backup and badge jobs"""
    if scheduler.running:
        return

    backup_hour, backup_minute = parse_time(backup_time or config.BACKUP_TIME)
    sweep_hour, sweep_minute = parse_time(BADGE_SWEEP_TIME)

    scheduler.add_job(
        run_auto_backup,
        CronTrigger(hour=backup_hour, minute=backup_minute),
        args=[store],
        id='auto_backup',
        replace_existing=True
    )

    scheduler.add_job(
        run_badge_sweep,
        CronTrigger(hour=sweep_hour, minute=sweep_minute),
        args=[store],
        id='badge_sweep',
        replace_existing=True
    )

    scheduler.start()
    logger.info(">>> APScheduler STARTED <<<")
    logger.info(f"Scheduled jobs: {[job.id for job in scheduler.get_jobs()]}")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("APScheduler stopped")
