"""Routine directory helpers."""

from __future__ import annotations

from collections.abc import Iterable

from routine_streaks.schema import Routine, RoutineCategory


def build_directory(routines: Iterable[Routine]) -> dict[str, RoutineCategory]:
    """Map routine ids to their category."""

    return {routine.routine_id: routine.category for routine in routines}


def total_minutes(routine: Routine) -> int:
    return sum(step.duration_minutes or 0 for step in routine.steps)


def filter_by_category(routines: Iterable[Routine], category=None) -> list[Routine]:
    """Return routines in ``category``; ``None`` or ``"All"`` keeps everything."""

    if category is None or (isinstance(category, str) and category.strip().lower() == "all"):
        return list(routines)
    wanted = RoutineCategory.parse(category)
    return [routine for routine in routines if routine.category is wanted]
