"""
Tracker service - caller-facing operations on top of HabitStore.
Enforces the monthly freeze allowance, awards badges on completion and
builds the summaries shown in the status line and daily notes.
"""
import logging
from datetime import date
from typing import List, Optional, Tuple

from habit_tracker.constants import (
    MAX_FREEZE_DAYS_PER_MONTH, DEFAULT_FREEZE_REASON,
    DAILY_NOTE_PLACEHOLDER, DEFAULT_DAILY_NOTE_FORMAT,
    SHORT_RATE_WINDOW, LONG_RATE_WINDOW,
)
from habit_tracker.exceptions import (
    HabitNotFoundException, CategoryNotFoundException,
    FreezeLimitReachedException, ValidationException,
)
from habit_tracker.schemas import (
    Badge, FreezeDay, Habit, HabitLog, HabitUpdate,
    HabitStats, OverviewStats, TodaySummary,
)
from habit_tracker.services.date_service import DateService
from habit_tracker.services.habit_store import HabitStore

logger = logging.getLogger("habit_tracker.tracker")


class TrackerService:
    """Service for user-level habit tracking actions"""

    def __init__(self, store: HabitStore, max_freeze_days: int = MAX_FREEZE_DAYS_PER_MONTH):
        self.store = store
        self.max_freeze_days = max_freeze_days

    def _require_habit(self, habit_id: str) -> Habit:
        habit = self.store.get_habit(habit_id)
        if not habit:
            raise HabitNotFoundException(habit_id)
        return habit

    @staticmethod
    def _require_date(value: str) -> date:
        try:
            return DateService.parse_date(value)
        except (TypeError, ValueError):
            raise ValidationException("date", f"expected YYYY-MM-DD, got {value!r}")

    # ==================== COMPLETION ====================

    def complete_habit(self, habit_id: str, day: Optional[str] = None) -> Tuple[HabitLog, List[Badge]]:
        """
        Toggle a habit for a day and award any milestone badges it unlocks.

        Args:
            habit_id: Habit to toggle
            day: YYYY-MM-DD, today when omitted

        Returns:
            Tuple of (log, newly awarded badges)

        Raises:
            HabitNotFoundException: If the habit does not exist
        """
        self._require_habit(habit_id)
        if day is not None:
            self._require_date(day)

        log = self.store.toggle_habit(habit_id, day)
        new_badges = self.store.check_and_award_badges(habit_id) if log.completed else []
        return log, new_badges

    def quick_toggle(self) -> Optional[HabitLog]:
        """Toggle the first habit due today that is not yet completed"""
        today = self.store.date_service.today()
        today_key = DateService.format_date(today)

        for habit in self._due_habits(today):
            log = self.store.get_log(habit.id, today_key)
            if not (log and log.completed):
                return self.store.toggle_habit(habit.id, today_key)
        return None

    def assign_category(self, habit_id: str, category_id: Optional[str]) -> Habit:
        """Move a habit into a category, or out of any category when category_id is None"""
        self._require_habit(habit_id)
        if category_id is not None and not self.store.get_category(category_id):
            raise CategoryNotFoundException(category_id)
        return self.store.update_habit(habit_id, HabitUpdate(category_id=category_id))

    # ==================== FREEZE DAYS ====================

    def freeze_day(self, day: str, reason: Optional[str] = DEFAULT_FREEZE_REASON) -> Optional[FreezeDay]:
        """
        Freeze a date within the monthly allowance.

        Returns:
            The new freeze day, or None when the date is already frozen

        Raises:
            FreezeLimitReachedException: If the date's month has no freezes left
        """
        target = self._require_date(day)
        if self.store.is_frozen(day):
            return None

        used = len(self.store.get_freeze_days_in_month(target.year, target.month))
        if used >= self.max_freeze_days:
            month = DateService.month_prefix(target.year, target.month)
            logger.info(f"Freeze refused for {day}: {used} already used in {month}")
            raise FreezeLimitReachedException(month, self.max_freeze_days)

        return self.store.add_freeze_day(day, reason)

    def toggle_freeze(self, day: str) -> bool:
        """
        Unfreeze a frozen date or freeze an unfrozen one.

        Returns:
            True if the date is frozen afterwards
        """
        if self.store.is_frozen(day):
            self.store.remove_freeze_day(day)
            return False
        return self.freeze_day(day) is not None

    def freezes_remaining(self) -> int:
        return max(0, self.max_freeze_days - self.store.get_freeze_days_this_month())

    # ==================== SUMMARIES ====================

    def _due_habits(self, day: date) -> List[Habit]:
        return [h for h in self.store.get_habits() if DateService.is_due(h, day)]

    def get_today_summary(self) -> TodaySummary:
        """Completed vs due counts for active habits due today"""
        today = self.store.date_service.today()
        today_key = DateService.format_date(today)
        due = self._due_habits(today)
        completed = 0
        for habit in due:
            log = self.store.get_log(habit.id, today_key)
            if log and log.completed:
                completed += 1
        return TodaySummary(completed=completed, due=len(due))

    def get_habit_stats(self, habit_id: str) -> HabitStats:
        self._require_habit(habit_id)
        return HabitStats(
            habit_id=habit_id,
            current_streak=self.store.get_current_streak_with_freeze(habit_id),
            longest_streak=self.store.get_longest_streak(habit_id),
            completion_rate_7=self.store.get_completion_rate(habit_id, SHORT_RATE_WINDOW),
            completion_rate_30=self.store.get_completion_rate(habit_id, LONG_RATE_WINDOW),
            total_completions=self.store.get_total_completions(habit_id),
            badges=self.store.get_badges(habit_id),
        )

    def get_overview(self) -> OverviewStats:
        """Aggregate figures over all active habits"""
        habits = self.store.get_habits()
        if not habits:
            return OverviewStats(
                total_badges=len(self.store.get_badges()),
                freezes_used_this_month=self.store.get_freeze_days_this_month(),
            )

        rates = [self.store.get_completion_rate(h.id, SHORT_RATE_WINDOW) for h in habits]
        return OverviewStats(
            active_habits=len(habits),
            total_completions=sum(self.store.get_total_completions(h.id) for h in habits),
            best_streak=max(self.store.get_longest_streak(h.id) for h in habits),
            average_rate_7=sum(rates) / len(habits),
            total_badges=len(self.store.get_badges()),
            freezes_used_this_month=self.store.get_freeze_days_this_month(),
        )

    def render_daily_note(self, template: Optional[str] = None, day: Optional[str] = None) -> str:
        """
        Render habit status for a daily note.

        The placeholder {{habits}} is replaced by a markdown task list of the
        habits due on the day, e.g. "- [x] 🏃 Run".
        """
        target = self._require_date(day) if day else self.store.date_service.today()
        key = DateService.format_date(target)

        lines = []
        for habit in self._due_habits(target):
            log = self.store.get_log(habit.id, key)
            mark = "x" if log and log.completed else " "
            label = f"{habit.emoji} {habit.name}" if habit.emoji else habit.name
            lines.append(f"- [{mark}] {label}")

        return (template or DEFAULT_DAILY_NOTE_FORMAT).replace(DAILY_NOTE_PLACEHOLDER, "\n".join(lines))
