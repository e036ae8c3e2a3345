from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from routine_streaks import config
from routine_streaks.errors import InvalidTimestamp
from routine_streaks.schema import CompletionEvent, Routine, RoutineCategory
from routine_streaks.streaks import (
    compute_both_streaks,
    compute_streak,
    compute_streaks_from_routines,
    parse_timestamp,
    to_calendar_date,
)

TODAY = date(2024, 3, 10)
DIRECTORY = {"am": "AM", "pm": "PM", "mask": "Weekly"}


def days_ago(*offsets):
    return {TODAY - timedelta(days=n) for n in offsets}


def event(routine_id, stamp):
    return CompletionEvent(routine_id, datetime.fromisoformat(stamp))


def test_empty_dates_give_zero():
    assert compute_streak(set(), TODAY) == 0


def test_streak_ending_today():
    assert compute_streak(days_ago(0, 1, 2), TODAY) == 3


def test_streak_ending_yesterday_counts():
    assert compute_streak(days_ago(1), TODAY) == 1
    assert compute_streak(days_ago(1, 2, 3), TODAY) == 3


def test_stale_history_is_broken():
    assert compute_streak(days_ago(2, 3, 4, 5), TODAY) == 0


def test_walk_stops_at_first_gap():
    assert compute_streak(days_ago(0, 1, 3, 4, 5), TODAY) == 2


def test_duplicate_days_count_once():
    single = compute_streak([TODAY], TODAY)
    doubled = compute_streak([TODAY, TODAY], TODAY)
    assert single == doubled == 1


def test_monotonic_extension():
    dates = days_ago(0, 1, 2)
    k = compute_streak(dates, TODAY)
    assert compute_streak(dates | days_ago(k), TODAY) == k + 1
    assert compute_streak(dates | days_ago(k + 2), TODAY) == k


def test_streak_across_month_and_dst_boundary():
    today = date(2024, 4, 1)
    dates = {date(2024, 4, 1), date(2024, 3, 31), date(2024, 3, 30), date(2024, 3, 29)}
    assert compute_streak(dates, today) == 4


def test_compute_both_streaks_empty():
    result = compute_both_streaks([], DIRECTORY, today=TODAY)
    assert (result.morning_streak, result.evening_streak) == (0, 0)
    assert result.total == 0


def test_morning_run_and_broken_evening():
    events = [
        event("am", "2024-03-10T07:00:00"),
        event("am", "2024-03-09T07:00:00"),
        event("am", "2024-03-08T07:00:00"),
        event("pm", "2024-03-07T21:00:00"),
    ]
    result = compute_both_streaks(events, DIRECTORY, today=TODAY)
    assert result.morning_streak == 3
    assert result.evening_streak == 0


def test_single_completion_yesterday():
    result = compute_both_streaks([event("am", "2024-03-09T06:30:00")], DIRECTORY, today=TODAY)
    assert result.morning_streak == 1


def test_categories_are_isolated():
    evenings = [event("pm", f"2024-03-{day:02d}T22:00:00") for day in (8, 9, 10)]
    result = compute_both_streaks(evenings, DIRECTORY, today=TODAY)
    assert result.morning_streak == 0
    assert result.evening_streak == 3


def test_unknown_and_other_routines_are_ignored():
    events = [
        event("mask", "2024-03-10T18:00:00"),
        event("ghost", "2024-03-10T18:00:00"),
        event("am", "2024-03-10T08:00:00"),
    ]
    result = compute_both_streaks(events, DIRECTORY, today=TODAY)
    assert result.morning_streak == 1
    assert result.evening_streak == 0


def test_callable_lookup_that_raises_key_error():
    def lookup(routine_id):
        return {"am": RoutineCategory.MORNING}[routine_id]

    events = [event("am", "2024-03-10T08:00:00"), event("missing", "2024-03-10T21:00:00")]
    result = compute_both_streaks(events, lookup, today=TODAY)
    assert result.morning_streak == 1
    assert result.evening_streak == 0


def test_same_day_completions_collapse():
    events = [event("am", "2024-03-10T06:00:00"), event("am", "2024-03-10T09:00:00")]
    assert compute_both_streaks(events, DIRECTORY, today=TODAY).morning_streak == 1


def test_aware_timestamps_normalized_to_utc():
    # 01:30 on the 10th at UTC+05:00 is still the 9th in UTC.
    stamp = datetime(2024, 3, 10, 1, 30, tzinfo=timezone(timedelta(hours=5)))
    assert to_calendar_date(stamp) == date(2024, 3, 9)


def test_iso_strings_with_z_suffix():
    assert to_calendar_date("2024-03-10T23:59:59Z") == date(2024, 3, 10)
    assert to_calendar_date("2024-03-10") == date(2024, 3, 10)


@pytest.mark.parametrize("value", ["not-a-date", "", 1710028800, None])
def test_unconvertible_timestamps_raise(value):
    with pytest.raises(InvalidTimestamp):
        to_calendar_date(value)


def test_string_timestamps_in_events():
    events = [CompletionEvent("am", "2024-03-10T07:00:00Z"), CompletionEvent("am", "2024-03-09T07:00:00Z")]
    assert compute_both_streaks(events, DIRECTORY, today=TODAY).morning_streak == 2


def test_bad_timestamp_in_history_raises():
    events = [CompletionEvent("am", "yesterday-ish")]
    with pytest.raises(InvalidTimestamp):
        compute_both_streaks(events, DIRECTORY, today=TODAY)


def test_compute_from_routine_objects():
    routines = [
        Routine("am", "Morning Glow", RoutineCategory.MORNING),
        Routine("pm", "Night Repair", RoutineCategory.EVENING),
    ]
    events = [event("pm", "2024-03-10T21:00:00"), event("pm", "2024-03-09T21:00:00")]
    result = compute_streaks_from_routines(events, routines, today=TODAY)
    assert result.evening_streak == 2
    assert result.total == 2


class FrozenClock(datetime):
    """``datetime`` whose ``now`` is pinned to 2024-03-11 03:45 UTC."""

    @classmethod
    def now(cls, tz=None):
        return datetime(2024, 3, 11, 3, 45, tzinfo=timezone.utc).astimezone(tz)


@pytest.fixture
def los_angeles(monkeypatch):
    monkeypatch.setenv("ROUTINE_STREAKS_TIMEZONE", "America/Los_Angeles")
    monkeypatch.setattr(config, "datetime", FrozenClock)
    config.get_settings.cache_clear()
    yield config.get_settings()
    config.get_settings.cache_clear()


def test_configured_zone_drives_today_and_event_days(los_angeles):
    # 03:30 UTC on the 11th is 20:30 on the 10th in Los Angeles.
    events = [
        CompletionEvent("am", "2024-03-09T15:00:00Z"),
        CompletionEvent("am", "2024-03-11T03:30:00Z"),
    ]
    assert los_angeles.current_date() == date(2024, 3, 10)
    result = compute_both_streaks(events, DIRECTORY)
    assert result.morning_streak == 2


def test_explicit_zone_matches_utc_days(los_angeles):
    events = [
        CompletionEvent("am", "2024-03-09T15:00:00Z"),
        CompletionEvent("am", "2024-03-11T03:30:00Z"),
    ]
    # In UTC today is the 11th and the run is broken by the missing 10th.
    assert compute_both_streaks(events, DIRECTORY, tz=timezone.utc).morning_streak == 1


def test_to_calendar_date_in_zone():
    stamp = datetime(2024, 3, 11, 3, 30, tzinfo=timezone.utc)
    assert to_calendar_date(stamp, ZoneInfo("America/Los_Angeles")) == date(2024, 3, 10)
    assert to_calendar_date(datetime(2024, 3, 11, 3, 30), ZoneInfo("America/Los_Angeles")) == date(2024, 3, 10)


def test_datetime_today_is_reduced_to_date():
    dates = {date(2024, 3, 10), date(2024, 3, 9)}
    assert compute_streak(dates, datetime(2024, 3, 10, 12)) == 2


def test_datetimes_in_date_set_are_reduced():
    dates = {datetime(2024, 3, 10, 8), datetime(2024, 3, 10, 20), datetime(2024, 3, 9, 7)}
    assert compute_streak(dates, TODAY) == 2


def test_datetime_today_in_compute_both_streaks():
    events = [event("am", "2024-03-10T07:00:00"), event("am", "2024-03-09T07:00:00")]
    result = compute_both_streaks(events, DIRECTORY, today=datetime(2024, 3, 10, 23, 0), tz=timezone.utc)
    assert result.morning_streak == 2


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-10T07:12:00.12345+00:00", datetime(2024, 3, 10, 7, 12, 0, 123450, tzinfo=timezone.utc)),
        ("2024-03-10 07:12:00.1+00", datetime(2024, 3, 10, 7, 12, 0, 100000, tzinfo=timezone.utc)),
        ("2024-03-10T07:12:00.1234567Z", datetime(2024, 3, 10, 7, 12, 0, 123456, tzinfo=timezone.utc)),
        ("2024-03-10T07:12:00+0530", datetime(2024, 3, 10, 1, 42, tzinfo=timezone.utc)),
    ],
)
def test_parse_timestamp_postgres_variants(value, expected):
    assert parse_timestamp(value) == expected


def test_negative_hour_offset_moves_utc_day():
    assert to_calendar_date("2024-03-10 23:30:00.5-05") == date(2024, 3, 11)
