"""
Pydantic models for the habit tracker snapshot.
Serialized field names are camelCase; attributes are snake_case.
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from habit_tracker.constants import DATA_VERSION, DATE_FORMAT, DAYS_IN_WEEK

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

Frequency = Literal["daily", "weekly", "custom"]
BadgeType = Literal["week", "month", "century", "year"]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


def _check_weekdays(days: Optional[List[int]]) -> Optional[List[int]]:
    if days is None:
        return None
    for day in days:
        if not 0 <= day < DAYS_IN_WEEK:
            raise ValueError(f"weekday index out of range: {day}")
    return days


def _check_calendar_date(value: str) -> str:
    datetime.strptime(value, DATE_FORMAT)
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


# ==================== ENTITIES ====================

class Habit(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    emoji: Optional[str] = None
    frequency: Frequency = "daily"
    custom_days: Optional[List[int]] = None  # 0 = Sunday ... 6 = Saturday
    category_id: Optional[str] = None
    goal_days: Optional[int] = Field(None, ge=1)
    created_at: str
    archived: bool = False
    order: int = 0

    @field_validator("custom_days")
    @classmethod
    def validate_custom_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        return _check_weekdays(value)


class HabitLog(CamelModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    habit_id: str
    completed: bool
    note: Optional[str] = None
    completed_at: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _check_calendar_date(value)


class Category(CamelModel):
    id: str
    name: str
    color: str
    emoji: Optional[str] = None
    order: int = 0


class FreezeDay(CamelModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    reason: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, value: str) -> str:
        return _check_calendar_date(value)


class Badge(CamelModel):
    id: str
    habit_id: str
    type: BadgeType
    earned_at: str


class HabitData(CamelModel):
    """Complete snapshot of all tracker entities"""
    habits: List[Habit] = Field(default_factory=list)
    logs: List[HabitLog] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)
    freeze_days: List[FreezeDay] = Field(default_factory=list)
    badges: List[Badge] = Field(default_factory=list)
    version: int = DATA_VERSION


# ==================== PATCHES ====================
# Only fields explicitly set on a patch are applied (model_dump(exclude_unset=True)).
# Required entity fields may be left out of a patch but never set to null.
# Patches carry no id field, so identity is never overwritten.

class HabitUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    emoji: Optional[str] = None
    frequency: Optional[Frequency] = None
    custom_days: Optional[List[int]] = None
    category_id: Optional[str] = None
    goal_days: Optional[int] = Field(None, ge=1)
    archived: Optional[bool] = None
    order: Optional[int] = None

    @field_validator("custom_days")
    @classmethod
    def validate_custom_days(cls, value: Optional[List[int]]) -> Optional[List[int]]:
        return _check_weekdays(value)

    @field_validator("name", "frequency", "archived", "order")
    @classmethod
    def validate_not_null(cls, value):
        return _reject_null(value)


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None
    emoji: Optional[str] = None
    order: Optional[int] = None

    @field_validator("name", "color", "order")
    @classmethod
    def validate_not_null(cls, value):
        return _reject_null(value)


# ==================== DERIVED RESULTS ====================

class BadgeMilestone(CamelModel):
    type: BadgeType
    days: int
    emoji: str
    label: str


class BadgeDetails(CamelModel):
    badge: Badge
    habit: Optional[Habit] = None
    milestone: BadgeMilestone


class TrendPoint(CamelModel):
    date: str
    rate: float


class TodaySummary(CamelModel):
    completed: int = 0
    due: int = 0

    def status_text(self) -> str:
        if self.due == 0:
            return "✓ No habits"
        return f"✓ {self.completed}/{self.due}"


class HabitStats(CamelModel):
    habit_id: str
    current_streak: int = 0
    longest_streak: int = 0
    completion_rate_7: float = 0.0
    completion_rate_30: float = 0.0
    total_completions: int = 0
    badges: List[Badge] = Field(default_factory=list)


class OverviewStats(CamelModel):
    active_habits: int = 0
    total_completions: int = 0
    best_streak: int = 0
    average_rate_7: float = 0.0
    total_badges: int = 0
    freezes_used_this_month: int = 0
