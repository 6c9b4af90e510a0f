"""
Date calculation service.
Wall clock access, YYYY-MM-DD key handling and habit due-day rules.
"""
from datetime import datetime, timedelta, date
from typing import Iterator

from habit_tracker.constants import (
    DATE_FORMAT, DAYS_IN_WEEK, WEEKLY_DEFAULT_DAYS,
    FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_CUSTOM,
)
from habit_tracker.schemas import Habit


class SystemClock:
    """Local wall clock"""

    def now(self) -> datetime:
        return datetime.now()


class DateService:
    """Service for date-related operations"""

    def __init__(self, clock=None):
        self.clock = clock or SystemClock()

    def now(self) -> datetime:
        return self.clock.now()

    def today(self) -> date:
        """Local calendar date of the clock (not shifted to UTC)"""
        return self.clock.now().date()

    def today_str(self) -> str:
        return self.format_date(self.today())

    def timestamp(self) -> str:
        """ISO timestamp used for createdAt/completedAt/earnedAt"""
        return self.clock.now().isoformat()

    @staticmethod
    def format_date(value: date) -> str:
        return value.strftime(DATE_FORMAT)

    @staticmethod
    def parse_date(value: str) -> date:
        """
        Parse a YYYY-MM-DD key as a local date.

        Raises:
            ValueError: If the string is not a valid date
        """
        return datetime.strptime(value, DATE_FORMAT).date()

    @staticmethod
    def month_prefix(year: int, month: int) -> str:
        """YYYY-MM prefix for a 1-based month"""
        return f"{year:04d}-{month:02d}"

    @staticmethod
    def weekday_index(value: date) -> int:
        """Weekday with Sunday = 0 ... Saturday = 6"""
        return (value.weekday() + 1) % DAYS_IN_WEEK

    @staticmethod
    def days_between(start: str, end: str) -> int:
        """Signed calendar-day difference between two date keys"""
        return (DateService.parse_date(end) - DateService.parse_date(start)).days

    @staticmethod
    def iter_days(start: date, end: date) -> Iterator[date]:
        """Yield each date from start to end inclusive"""
        current = start
        while current <= end:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def is_due(habit: Habit, value: date) -> bool:
        """
        Whether the habit's schedule requires action on the given date.

        - daily: every day
        - weekly: days in custom_days, Sunday only when unset
        - custom: days in custom_days, never when unset
        """
        weekday = DateService.weekday_index(value)

        if habit.frequency == FREQUENCY_DAILY:
            return True
        if habit.frequency == FREQUENCY_WEEKLY:
            days = habit.custom_days if habit.custom_days is not None else WEEKLY_DEFAULT_DAYS
            return weekday in days
        if habit.frequency == FREQUENCY_CUSTOM:
            return habit.custom_days is not None and weekday in habit.custom_days
        return False
