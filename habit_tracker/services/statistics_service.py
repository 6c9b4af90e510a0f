"""
Statistics service.
Completion rate, day-of-week performance and daily trend over trailing windows.
"""
from datetime import date, timedelta
from typing import List, Optional, Set

from habit_tracker.constants import (
    DAYS_IN_WEEK, DAY_OF_WEEK_WINDOW, TREND_WINDOW,
    TREND_FROZEN, TREND_COMPLETED, TREND_MISSED,
)
from habit_tracker.schemas import HabitLog, TrendPoint
from habit_tracker.services.date_service import DateService


class StatisticsService:
    """Service for habit statistics"""

    @staticmethod
    def _window(today: date, days: int) -> tuple[date, str, str]:
        start = today - timedelta(days=days - 1)
        return start, DateService.format_date(start), DateService.format_date(today)

    def completion_rate(self, logs: List[HabitLog], today: date, days: int) -> float:
        """
        Percentage of the last `days` days (today included) with a completed log.

        Returns:
            completed / days * 100, or 0 when days <= 0
        """
        if days <= 0:
            return 0.0

        _, start_key, end_key = self._window(today, days)
        completed = sum(
            1 for log in logs
            if log.completed and start_key <= log.date <= end_key
        )
        return completed / days * 100

    def day_of_week_stats(
        self,
        logs: List[HabitLog],
        today: date,
        days: int = DAY_OF_WEEK_WINDOW
    ) -> List[float]:
        """
        Completion percentage per weekday (index 0 = Sunday).

        The denominator is how often each weekday occurs in the window,
        regardless of whether the habit was due.
        """
        totals = [0] * DAYS_IN_WEEK
        counts = [0] * DAYS_IN_WEEK
        if days <= 0:
            return [0.0] * DAYS_IN_WEEK

        start, start_key, end_key = self._window(today, days)
        for day in DateService.iter_days(start, today):
            totals[DateService.weekday_index(day)] += 1

        for log in logs:
            if log.completed and start_key <= log.date <= end_key:
                counts[DateService.weekday_index(DateService.parse_date(log.date))] += 1

        return [
            (count / total * 100) if total > 0 else 0.0
            for count, total in zip(counts, totals)
        ]

    def completion_trend(
        self,
        logs: List[HabitLog],
        today: date,
        frozen_dates: Optional[Set[str]] = None,
        days: int = TREND_WINDOW
    ) -> List[TrendPoint]:
        """
        One point per day of the window, oldest first.

        rate is -1 for a frozen day (takes priority), 100 when completed, else 0.
        """
        frozen = frozen_dates or set()
        completed = {log.date for log in logs if log.completed}

        points = []
        for offset in range(days - 1, -1, -1):
            key = DateService.format_date(today - timedelta(days=offset))
            if key in frozen:
                rate = TREND_FROZEN
            elif key in completed:
                rate = TREND_COMPLETED
            else:
                rate = TREND_MISSED
            points.append(TrendPoint(date=key, rate=rate))
        return points
