"""
Streak calculation service.
Works on a habit's logs only; callers supply "today" and the frozen dates.
"""
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set

from habit_tracker.constants import MAX_STREAK_ITERATIONS
from habit_tracker.schemas import Habit, HabitLog
from habit_tracker.services.date_service import DateService


class StreakService:
    """Service for streak calculations"""

    @staticmethod
    def completed_dates(logs: Iterable[HabitLog]) -> Set[str]:
        return {log.date for log in logs if log.completed}

    def current_streak(
        self,
        habit: Habit,
        logs: List[HabitLog],
        today: date,
        frozen_dates: Optional[Set[str]] = None
    ) -> int:
        """
        Count consecutive completed days ending today (or yesterday).

        Walks backward one day at a time. If today is not completed (or frozen,
        when frozen_dates is given) the walk starts from yesterday, so an
        unchecked today does not break the streak.

        - completed day: streak + 1
        - frozen day: skipped, neither counts nor breaks
        - incomplete day: breaks only when the habit was due on it

        Args:
            habit: Habit whose schedule decides due days
            logs: Logs of this habit
            today: Local date to start from
            frozen_dates: Freeze-day keys, or None to ignore freezes

        Returns:
            Current streak length
        """
        completed = self.completed_dates(logs)
        if not completed:
            return 0

        frozen = frozen_dates or set()
        current = today
        today_key = DateService.format_date(today)
        if today_key not in completed and today_key not in frozen:
            current -= timedelta(days=1)

        streak = 0
        for _ in range(MAX_STREAK_ITERATIONS):
            key = DateService.format_date(current)
            if key in frozen:
                current -= timedelta(days=1)
                continue

            if key in completed:
                streak += 1
            elif DateService.is_due(habit, current):
                break
            current -= timedelta(days=1)

        return streak

    def longest_streak(self, logs: List[HabitLog]) -> int:
        """
        Longest run of consecutive calendar days with a completed log.

        Due days and freeze days are not considered here, unlike
        current_streak.
        """
        dates = sorted(self.completed_dates(logs))
        if not dates:
            return 0

        longest = 1
        current = 1
        for previous, day in zip(dates, dates[1:]):
            if DateService.days_between(previous, day) == 1:
                current += 1
                longest = max(longest, current)
            else:
                current = 1

        return longest

    @staticmethod
    def total_completions(logs: Iterable[HabitLog]) -> int:
        return sum(1 for log in logs if log.completed)
