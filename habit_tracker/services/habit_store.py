"""
HabitStore - in-memory state engine over one persisted snapshot.

Owns habits, logs, categories, freeze days and badges. Every mutation is
applied to the in-memory snapshot and then the whole snapshot is saved.
A failed save propagates and the in-memory change is kept.
"""
import json
import logging
import random
import string
import time
from typing import List, Optional, Set

from pydantic import ValidationError

from habit_tracker.constants import (
    BADGE_MILESTONES, CATEGORY_COLORS, FREQUENCY_DAILY, DAY_OF_WEEK_WINDOW, TREND_WINDOW,
)
from habit_tracker.repositories.snapshot_repository import SnapshotStore, serialize_snapshot
from habit_tracker.schemas import (
    Habit, HabitLog, Category, FreezeDay, Badge, HabitData,
    HabitUpdate, CategoryUpdate, BadgeMilestone, BadgeDetails, TrendPoint,
)
from habit_tracker.services.date_service import DateService
from habit_tracker.services.statistics_service import StatisticsService
from habit_tracker.services.streak_service import StreakService

logger = logging.getLogger("habit_tracker.store")

_ID_ALPHABET = string.digits + string.ascii_lowercase
_DEFAULTED_FIELDS = ("categories", "freezeDays", "badges", "version")


def _to_base36(value: int) -> str:
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ID_ALPHABET[remainder])
    return "".join(reversed(digits)) or "0"


def generate_id() -> str:
    """Opaque unique id: base-36 millisecond timestamp plus random suffix"""
    return _to_base36(int(time.time() * 1000)) + "".join(random.choices(_ID_ALPHABET, k=11))


def _next_order(items) -> int:
    return max([0] + [item.order for item in items]) + 1


class HabitStore:
    """Habit tracking engine backed by a durable snapshot store"""

    def __init__(self, storage: SnapshotStore, clock=None):
        self.storage = storage
        self.data = HabitData()
        self.date_service = DateService(clock)
        self.streaks = StreakService()
        self.statistics = StatisticsService()

    def load(self) -> None:
        """Load the persisted snapshot, keeping defaults when nothing is stored"""
        saved = self.storage.load()
        if saved is not None:
            self.data = saved
        logger.info(
            f"Loaded snapshot: {len(self.data.habits)} habits, {len(self.data.logs)} logs"
        )

    def save(self) -> None:
        self.storage.save(self.data)

    # ==================== HABITS ====================

    def get_habits(self, include_archived: bool = False) -> List[Habit]:
        """Habits sorted by order (stable on ties)"""
        habits = self.data.habits if include_archived else [
            h for h in self.data.habits if not h.archived
        ]
        return sorted(habits, key=lambda h: h.order)

    def get_habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self.data.habits if h.id == habit_id), None)

    def add_habit(self, name: str, frequency: str = FREQUENCY_DAILY, **options) -> Habit:
        """
        Create a habit appended after the current last one.

        Args:
            name: Display name
            frequency: daily, weekly or custom
            **options: description, emoji, custom_days, category_id, goal_days

        Returns:
            The new habit

        Raises:
            TypeError: If an option is not a habit field
        """
        unknown = sorted(set(options) - set(Habit.model_fields))
        if unknown:
            raise TypeError(f"add_habit() got unexpected options: {', '.join(unknown)}")
        for key in ("id", "created_at", "archived", "order"):
            options.pop(key, None)
        habit = Habit(
            **options,
            id=generate_id(),
            name=name,
            frequency=frequency,
            created_at=self.date_service.timestamp(),
            archived=False,
            order=_next_order(self.data.habits),
        )
        self.data.habits.append(habit)
        self.save()
        logger.info(f"Added habit '{name}' ({habit.id})")
        return habit

    def update_habit(self, habit_id: str, updates: HabitUpdate) -> Optional[Habit]:
        """Apply the fields set on the patch; id never changes"""
        habit = self.get_habit(habit_id)
        if not habit:
            return None

        for key, value in updates.model_dump(exclude_unset=True).items():
            setattr(habit, key, value)

        self.save()
        return habit

    def archive_habit(self, habit_id: str) -> bool:
        return self.update_habit(habit_id, HabitUpdate(archived=True)) is not None

    def delete_habit(self, habit_id: str) -> bool:
        """Hard-delete a habit together with all of its logs"""
        habit = self.get_habit(habit_id)
        if not habit:
            return False

        self.data.habits.remove(habit)
        self.data.logs = [log for log in self.data.logs if log.habit_id != habit_id]
        self.save()
        logger.info(f"Deleted habit {habit_id} and its logs")
        return True

    def reorder_habits(self, ordered_ids: List[str]) -> None:
        """Set order to each id's position in the sequence; unknown ids are ignored"""
        for index, habit_id in enumerate(ordered_ids):
            habit = self.get_habit(habit_id)
            if habit:
                habit.order = index
        self.save()

    def get_habits_by_category(self, category_id: Optional[str] = None) -> List[Habit]:
        """Active habits in a category, or without one when category_id is None"""
        return [h for h in self.get_habits() if h.category_id == category_id]

    # ==================== LOGS ====================

    def get_logs(
        self,
        habit_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> List[HabitLog]:
        """Logs filtered by habit and inclusive date range, newest first"""
        logs = self.data.logs
        if habit_id:
            logs = [log for log in logs if log.habit_id == habit_id]
        if start_date:
            logs = [log for log in logs if log.date >= start_date]
        if end_date:
            logs = [log for log in logs if log.date <= end_date]
        return sorted(logs, key=lambda log: log.date, reverse=True)

    def get_log(self, habit_id: str, date: str) -> Optional[HabitLog]:
        return next(
            (log for log in self.data.logs if log.habit_id == habit_id and log.date == date),
            None
        )

    def _stamp(self, log: HabitLog) -> None:
        log.completed_at = self.date_service.timestamp() if log.completed else None

    def set_completion(
        self,
        habit_id: str,
        date: str,
        completed: bool,
        note: Optional[str] = None
    ) -> HabitLog:
        """Create or overwrite the single log for (habit_id, date)"""
        log = self.get_log(habit_id, date)
        if log is None:
            log = HabitLog(habit_id=habit_id, date=date, completed=completed)
            self.data.logs.append(log)
        log.completed = completed
        log.note = note
        self._stamp(log)
        self.save()
        return log

    def toggle_habit(self, habit_id: str, date: Optional[str] = None) -> HabitLog:
        """Flip completion for the date (today by default); a new log starts completed"""
        target = date or self.date_service.today_str()
        log = self.get_log(habit_id, target)
        if log is None:
            log = HabitLog(habit_id=habit_id, date=target, completed=True)
            self.data.logs.append(log)
        else:
            log.completed = not log.completed
        self._stamp(log)
        self.save()
        logger.debug(f"Toggled {habit_id} on {target}: completed={log.completed}")
        return log

    # ==================== STREAKS ====================

    def _frozen_dates(self) -> Set[str]:
        return {f.date for f in self.data.freeze_days}

    def get_current_streak(self, habit_id: str) -> int:
        habit = self.get_habit(habit_id)
        if not habit:
            return 0
        return self.streaks.current_streak(
            habit, self.get_logs(habit_id), self.date_service.today()
        )

    def get_current_streak_with_freeze(self, habit_id: str) -> int:
        habit = self.get_habit(habit_id)
        if not habit:
            return 0
        return self.streaks.current_streak(
            habit, self.get_logs(habit_id), self.date_service.today(), self._frozen_dates()
        )

    def get_longest_streak(self, habit_id: str) -> int:
        return self.streaks.longest_streak(self.get_logs(habit_id))

    def get_total_completions(self, habit_id: str) -> int:
        return self.streaks.total_completions(self.get_logs(habit_id))

    # ==================== STATISTICS ====================

    def get_completion_rate(self, habit_id: str, days: int) -> float:
        return self.statistics.completion_rate(
            self.get_logs(habit_id), self.date_service.today(), days
        )

    def get_day_of_week_stats(self, habit_id: str, days: int = DAY_OF_WEEK_WINDOW) -> List[float]:
        return self.statistics.day_of_week_stats(
            self.get_logs(habit_id), self.date_service.today(), days
        )

    def get_completion_trend(self, habit_id: str, days: int = TREND_WINDOW) -> List[TrendPoint]:
        return self.statistics.completion_trend(
            self.get_logs(habit_id), self.date_service.today(), self._frozen_dates(), days
        )

    # ==================== CATEGORIES ====================

    def get_categories(self) -> List[Category]:
        return sorted(self.data.categories, key=lambda c: c.order)

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.data.categories if c.id == category_id), None)

    def add_category(
        self,
        name: str,
        color: Optional[str] = None,
        emoji: Optional[str] = None
    ) -> Category:
        """Create a category; without a color, take the first unused palette color"""
        used = {c.color for c in self.data.categories}
        if not color:
            color = next((c for c in CATEGORY_COLORS if c not in used), CATEGORY_COLORS[0])

        category = Category(
            id=generate_id(),
            name=name,
            color=color,
            emoji=emoji,
            order=_next_order(self.data.categories),
        )
        self.data.categories.append(category)
        self.save()
        logger.info(f"Added category '{name}' ({category.id})")
        return category

    def update_category(self, category_id: str, updates: CategoryUpdate) -> Optional[Category]:
        category = self.get_category(category_id)
        if not category:
            return None

        for key, value in updates.model_dump(exclude_unset=True).items():
            setattr(category, key, value)

        self.save()
        return category

    def delete_category(self, category_id: str) -> bool:
        """Delete a category and detach it from its habits"""
        category = self.get_category(category_id)
        if not category:
            return False

        self.data.categories.remove(category)
        for habit in self.data.habits:
            if habit.category_id == category_id:
                habit.category_id = None
        self.save()
        return True

    # ==================== FREEZE DAYS ====================

    def get_freeze_days(self) -> List[FreezeDay]:
        return list(self.data.freeze_days)

    def is_frozen(self, date: str) -> bool:
        return any(f.date == date for f in self.data.freeze_days)

    def add_freeze_day(self, date: str, reason: Optional[str] = None) -> Optional[FreezeDay]:
        """Freeze a date; returns None when it is already frozen"""
        if self.is_frozen(date):
            return None

        freeze_day = FreezeDay(date=date, reason=reason)
        self.data.freeze_days.append(freeze_day)
        self.save()
        logger.info(f"Froze {date}")
        return freeze_day

    def remove_freeze_day(self, date: str) -> bool:
        freeze_day = next((f for f in self.data.freeze_days if f.date == date), None)
        if not freeze_day:
            return False

        self.data.freeze_days.remove(freeze_day)
        self.save()
        return True

    def get_freeze_days_in_month(self, year: int, month: int) -> List[FreezeDay]:
        prefix = DateService.month_prefix(year, month)
        return [f for f in self.data.freeze_days if f.date.startswith(prefix)]

    def get_freeze_days_this_month(self) -> int:
        """Count of freeze days in the current month; the cap is enforced by callers"""
        today = self.date_service.today()
        return len(self.get_freeze_days_in_month(today.year, today.month))

    # ==================== BADGES ====================

    def get_badges(self, habit_id: Optional[str] = None) -> List[Badge]:
        if habit_id:
            return [b for b in self.data.badges if b.habit_id == habit_id]
        return list(self.data.badges)

    def has_badge(self, habit_id: str, badge_type: str) -> bool:
        return any(b.habit_id == habit_id and b.type == badge_type for b in self.data.badges)

    def award_badge(self, habit_id: str, badge_type: str) -> Optional[Badge]:
        """Award a badge once per (habit, type); returns None for duplicates"""
        if self.has_badge(habit_id, badge_type):
            return None

        badge = Badge(
            id=generate_id(),
            habit_id=habit_id,
            type=badge_type,
            earned_at=self.date_service.timestamp(),
        )
        self.data.badges.append(badge)
        self.save()
        logger.info(f"Awarded '{badge_type}' badge to habit {habit_id}")
        return badge

    def check_and_award_badges(self, habit_id: str) -> List[Badge]:
        """Award every milestone reached by the freeze-aware current streak"""
        streak = self.get_current_streak_with_freeze(habit_id)
        new_badges = []

        for milestone in BADGE_MILESTONES:
            if streak >= milestone["days"] and not self.has_badge(habit_id, milestone["type"]):
                badge = self.award_badge(habit_id, milestone["type"])
                if badge:
                    new_badges.append(badge)

        return new_badges

    def get_all_badges_with_details(self) -> List[BadgeDetails]:
        milestones = {m["type"]: BadgeMilestone(**m) for m in BADGE_MILESTONES}
        return [
            BadgeDetails(
                badge=badge,
                habit=self.get_habit(badge.habit_id),
                milestone=milestones[badge.type],
            )
            for badge in self.data.badges
        ]

    # ==================== EXPORT/IMPORT ====================

    def export_data(self) -> str:
        """Whole snapshot as indented JSON"""
        return serialize_snapshot(self.data, indent=2)

    def import_data(self, text: str) -> bool:
        """
        Replace the snapshot with imported JSON.

        Rejects unparsable text and payloads without both habits and logs,
        leaving the current state untouched. Missing newer fields
        (categories, freezeDays, badges, version) are filled with defaults.

        Returns:
            True if the snapshot was replaced
        """
        try:
            payload = json.loads(text)
        except (TypeError, ValueError) as e:
            logger.warning(f"Import rejected: invalid JSON ({e})")
            return False

        if not isinstance(payload, dict) or payload.get("habits") is None or payload.get("logs") is None:
            logger.warning("Import rejected: habits and logs are required")
            return False

        for key in _DEFAULTED_FIELDS:
            if payload.get(key) is None:
                payload.pop(key, None)

        try:
            imported = HabitData.model_validate(payload)
        except ValidationError as e:
            logger.warning(f"Import rejected: {e.error_count()} invalid fields")
            return False

        self.data = imported
        self.save()
        logger.info(
            f"Imported snapshot: {len(imported.habits)} habits, {len(imported.logs)} logs"
        )
        return True
