"""Core data schema for routines and completion history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class RoutineCategory(str, Enum):
    """Daily slot a routine belongs to."""

    MORNING = "AM"
    EVENING = "PM"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value) -> "RoutineCategory":
        """Map a raw category tag to a member; unknown tags become OTHER."""

        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.OTHER
        tag = value.strip().upper()
        if tag in ("AM", "MORNING"):
            return cls.MORNING
        if tag in ("PM", "EVENING"):
            return cls.EVENING
        return cls.OTHER


@dataclass(frozen=True)
class CompletionEvent:
    """A recorded completion of one routine."""

    routine_id: str
    completed_at: datetime


@dataclass(frozen=True)
class StreakResult:
    morning_streak: int
    evening_streak: int

    @property
    def total(self) -> int:
        return self.morning_streak + self.evening_streak


@dataclass
class RoutineStep:
    title: str
    duration_minutes: int = 0


@dataclass
class Routine:
    """Routine directory entry with its steps."""

    routine_id: str
    title: str
    category: RoutineCategory
    steps: list[RoutineStep] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DayStatus:
    """Per-day calendar flags for the two streak categories."""

    day: date
    has_morning: bool
    has_evening: bool
