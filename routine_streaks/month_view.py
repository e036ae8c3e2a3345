"""Month calendar of morning/evening completions."""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timezone, tzinfo

from routine_streaks.schema import CompletionEvent, DayStatus, RoutineCategory
from routine_streaks.streaks import CategoryLookup, resolve_category, resolve_zone, to_calendar_date


def _check_month(year: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    if not 1 <= year <= 9999:
        raise ValueError(f"year out of range: {year}")


def completions_by_day(
    events: Iterable[CompletionEvent],
    tz: tzinfo = timezone.utc,
) -> dict[date, list[CompletionEvent]]:
    """Group completions by calendar day in ``tz``."""

    grouped: dict[date, list[CompletionEvent]] = defaultdict(list)
    for event in events:
        grouped[to_calendar_date(event.completed_at, tz)].append(event)
    return dict(grouped)


def month_day_status(
    events: Iterable[CompletionEvent],
    category_of: CategoryLookup,
    year: int,
    month: int,
    tz: tzinfo | None = None,
) -> list[DayStatus]:
    """Return one ``DayStatus`` per day of the month.

    Days are taken in ``tz``, defaulting to the configured zone like
    ``compute_both_streaks``.
    """

    _check_month(year, month)
    grouped = completions_by_day(events, resolve_zone(tz))
    _, days_in_month = calendar.monthrange(year, month)

    statuses = []
    for day_number in range(1, days_in_month + 1):
        day = date(year, month, day_number)
        categories = {resolve_category(category_of, event.routine_id) for event in grouped.get(day, [])}
        statuses.append(
            DayStatus(
                day=day,
                has_morning=RoutineCategory.MORNING in categories,
                has_evening=RoutineCategory.EVENING in categories,
            )
        )
    return statuses


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` months forward (or back when negative)."""

    _check_month(year, month)
    index = year * 12 + (month - 1) + offset
    new_year, new_month = divmod(index, 12)
    _check_month(new_year, new_month + 1)
    return new_year, new_month + 1


def leading_blank_days(year: int, month: int) -> int:
    """Empty cells before day 1 in a Sunday-first week grid."""

    _check_month(year, month)
    return (date(year, month, 1).weekday() + 1) % 7
