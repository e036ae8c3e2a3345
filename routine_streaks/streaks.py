"""Morning / evening streak computation over completion history."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Union

from routine_streaks.config import get_settings, today_in
from routine_streaks.errors import InvalidTimestamp
from routine_streaks.routines import build_directory
from routine_streaks.schema import CompletionEvent, Routine, RoutineCategory, StreakResult

logger = logging.getLogger(__name__)

CategoryLookup = Union[Mapping[str, object], Callable[[str], object]]

_ONE_DAY = timedelta(days=1)

# Postgres renders timestamptz with 1-6 fraction digits and "+HH" offsets.
_ISO_DATETIME = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt ](?P<clock>\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<fraction>\d+))?(?P<offset>[+-]\d{2}(?::?\d{2})?)?$"
)


def _normalize_iso(text: str) -> str:
    match = _ISO_DATETIME.match(text)
    if not match:
        return text
    normalized = f"{match['date']}T{match['clock']}"
    if match["fraction"]:
        normalized += "." + (match["fraction"] + "000000")[:6]
    offset = match["offset"]
    if offset:
        digits = offset[1:].replace(":", "")
        normalized += f"{offset[0]}{digits[:2]}:{digits[2:4] or '00'}"
    return normalized


def parse_timestamp(value, location: str | None = None) -> datetime:
    """Parse an ISO-8601 date-time string.

    A trailing ``Z``, any number of fraction digits and ``+HH`` offsets are
    accepted.
    """

    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise InvalidTimestamp(value, location)
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(_normalize_iso(text))
    except ValueError as exc:
        raise InvalidTimestamp(value, location) from exc


def to_calendar_date(value, tz: tzinfo = timezone.utc) -> date:
    """Reduce a timestamp to its calendar date in ``tz``.

    Naive datetimes are taken as UTC before conversion. Plain dates pass
    through. Strings go through ``parse_timestamp``. Anything else raises
    ``InvalidTimestamp``.
    """

    if isinstance(value, str):
        value = parse_timestamp(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(tz).date()
    if isinstance(value, date):
        return value
    raise InvalidTimestamp(value)


def resolve_zone(tz: tzinfo | None = None) -> tzinfo:
    """Return ``tz``, or the configured zone when it is ``None``."""

    return tz if tz is not None else get_settings().zone


def compute_streak(dates: Iterable[date], today: date, tz: tzinfo = timezone.utc) -> int:
    """Count consecutive days ending today or yesterday.

    History whose most recent day is older than yesterday scores 0. Datetimes
    in ``dates`` or as ``today`` are reduced to their date in ``tz`` first.
    """

    today = to_calendar_date(today, tz)
    days = sorted({to_calendar_date(day, tz) for day in dates}, reverse=True)
    if not days:
        return 0

    if days[0] != today and days[0] != today - _ONE_DAY:
        return 0

    streak = 1
    current = days[0]
    for previous in days[1:]:
        if previous != current - _ONE_DAY:
            break
        streak += 1
        current = previous
    return streak


def resolve_category(category_of: CategoryLookup, routine_id: str) -> RoutineCategory:
    """Look a routine up in the directory; unknown routines resolve to OTHER."""

    if isinstance(category_of, Mapping):
        raw = category_of.get(routine_id)
    else:
        try:
            raw = category_of(routine_id)
        except LookupError:
            raw = None
    return RoutineCategory.parse(raw)


def collect_category_dates(
    events: Iterable[CompletionEvent],
    category_of: CategoryLookup,
    tz: tzinfo = timezone.utc,
) -> tuple[set[date], set[date]]:
    """Split completions into morning and evening date sets, as days in ``tz``."""

    morning: set[date] = set()
    evening: set[date] = set()
    for event in events:
        category = resolve_category(category_of, event.routine_id)
        if category is RoutineCategory.MORNING:
            morning.add(to_calendar_date(event.completed_at, tz))
        elif category is RoutineCategory.EVENING:
            evening.add(to_calendar_date(event.completed_at, tz))
    return morning, evening


def compute_both_streaks(
    events: Iterable[CompletionEvent],
    category_of: CategoryLookup,
    today: date | None = None,
    tz: tzinfo | None = None,
) -> StreakResult:
    """Compute the current morning and evening streaks.

    One zone (``tz`` or the configured one) decides both which day ``today``
    is and which day each completion falls on; ``today`` is resolved once so
    both categories are measured against the same day.
    """

    tz = resolve_zone(tz)
    if today is None:
        today = today_in(tz)

    morning_dates, evening_dates = collect_category_dates(events, category_of, tz)
    result = StreakResult(
        morning_streak=compute_streak(morning_dates, today, tz),
        evening_streak=compute_streak(evening_dates, today, tz),
    )
    logger.debug(
        "streaks for %s (%s): %d morning days, %d evening days -> %s",
        today,
        tz,
        len(morning_dates),
        len(evening_dates),
        result,
    )
    return result


def compute_streaks_from_routines(
    events: Iterable[CompletionEvent],
    routines: Iterable[Routine],
    today: date | None = None,
    tz: tzinfo | None = None,
) -> StreakResult:
    return compute_both_streaks(events, build_directory(routines), today=today, tz=tz)
