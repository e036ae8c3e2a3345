"""Streamlit demo UI for routine-streaks."""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path
from typing import Any

from routine_streaks.adapters import csv_adapter, json_adapter
from routine_streaks.config import get_settings
from routine_streaks.month_view import leading_blank_days, month_day_status, shift_month
from routine_streaks.routines import build_directory, total_minutes
from routine_streaks.schema import RoutineCategory
from routine_streaks.streaks import compute_both_streaks

WEEKDAY_HEADER = ["S", "M", "T", "W", "T", "F", "S"]


def _adapter_for(file_path: str):
    suffix = Path(file_path).suffix.lower()
    if suffix == ".csv":
        return csv_adapter
    if suffix == ".json":
        return json_adapter
    raise ValueError("Unsupported file type. Please use .csv or .json")


def _save_uploaded(uploaded_file) -> str:
    suffix = Path(uploaded_file.name).suffix.lower()
    with tempfile.NamedTemporaryFile(delete=False, suffix=suffix) as handle:
        handle.write(uploaded_file.getbuffer())
        return handle.name


def _build_routine_rows(routines: list) -> list[dict[str, Any]]:
    return [
        {
            "routine": routine.title or routine.routine_id,
            "mode": routine.category.value,
            "minutes": total_minutes(routine),
            "tags": ", ".join(routine.tags),
        }
        for routine in routines
    ]


def run_engine(events: list, routines: list, today: date, year: int, month: int) -> dict[str, Any]:
    """Compute streaks and the month grid; returns a UI-friendly payload."""

    directory = build_directory(routines)
    streaks = compute_both_streaks(events, directory, today=today)
    days = month_day_status(events, directory, year, month)

    return {
        "morning_streak": streaks.morning_streak,
        "evening_streak": streaks.evening_streak,
        "total_streak": streaks.total,
        "blank_days": leading_blank_days(year, month),
        "days": days,
        "morning_days": sum(1 for day in days if day.has_morning),
        "evening_days": sum(1 for day in days if day.has_evening),
        "routines": _build_routine_rows(routines),
        "skipped_categories": sum(1 for routine in routines if routine.category is RoutineCategory.OTHER),
    }


def _grid_rows(blank_days: int, days: list) -> list[list[str]]:
    cells = [""] * blank_days
    for status in days:
        marks = ("☀" if status.has_morning else "·") + ("☾" if status.has_evening else "·")
        cells.append(f"{status.day.day} {marks}")
    cells += [""] * (-len(cells) % 7)
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]


def main() -> None:
    import streamlit as st

    settings = get_settings()
    st.set_page_config(page_title="Routine Streaks Demo", layout="wide")
    st.title("Routine Streaks — Streamlit Demo")

    today_default = settings.current_date()
    if "month" not in st.session_state:
        st.session_state["month"] = (today_default.year, today_default.month)

    with st.sidebar:
        st.header("Controls")
        uploaded_completions = st.file_uploader("Completions export", type=["csv", "json"])
        uploaded_routines = st.file_uploader("Routine directory", type=["csv", "json"])
        use_demo = st.checkbox("Load demo dataset", value=True)
        skip_invalid = st.checkbox("Skip rows with bad timestamps", value=False)
        today = st.date_input("Today", value=today_default)
        prev_col, next_col = st.columns(2)
        if prev_col.button("◀ Month"):
            st.session_state["month"] = shift_month(*st.session_state["month"], -1)
        if next_col.button("Month ▶"):
            st.session_state["month"] = shift_month(*st.session_state["month"], 1)

    try:
        if use_demo:
            completions_path, routines_path = settings.DEMO_COMPLETIONS, settings.DEMO_ROUTINES
        elif uploaded_completions is not None and uploaded_routines is not None:
            completions_path = _save_uploaded(uploaded_completions)
            routines_path = _save_uploaded(uploaded_routines)
        else:
            st.info("Upload both files or enable 'Load demo dataset'.")
            return

        events = _adapter_for(completions_path).parse(completions_path, skip_invalid=skip_invalid)
        routines = _adapter_for(routines_path).parse_routines(routines_path)

        year, month = st.session_state["month"]
        result = run_engine(events, routines, today, year, month)

        st.success(f"Loaded {len(events)} completions across {len(routines)} routines.")

        c1, c2, c3 = st.columns(3)
        c1.metric("AM streak", result["morning_streak"])
        c2.metric("PM streak", result["evening_streak"])
        c3.metric("Total", result["total_streak"])

        st.subheader(date(year, month, 1).strftime("%B %Y"))
        st.table([WEEKDAY_HEADER] + _grid_rows(result["blank_days"], result["days"]))
        st.caption(f"{result['morning_days']} AM days, {result['evening_days']} PM days this month")

        st.subheader("Routines")
        st.table(result["routines"])
        if result["skipped_categories"]:
            st.caption(f"{result['skipped_categories']} routine(s) have no AM/PM mode and do not count toward streaks.")

    except ValueError as exc:
        st.error(f"Input error: {exc}")


if __name__ == "__main__":
    main()
