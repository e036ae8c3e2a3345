"""CSV adapter for completion history and routine directories."""

from __future__ import annotations

import csv
import logging

from routine_streaks.errors import InvalidRecord, InvalidTimestamp
from routine_streaks.schema import CompletionEvent, Routine, RoutineCategory, RoutineStep
from routine_streaks.streaks import parse_timestamp

logger = logging.getLogger(__name__)

_ROUTINE_ID_FIELDS = ("routine_id", "roadmap_id")


def _parse_row(row: dict, row_number: int) -> CompletionEvent:
    location = f"Row {row_number}"
    routine_id = next((row[name] for name in _ROUTINE_ID_FIELDS if row.get(name)), None)
    missing = [] if routine_id else ["routine_id"]
    if not row.get("completed_at"):
        missing.append("completed_at")
    if missing:
        raise InvalidRecord(location, f"missing required fields {missing}")

    return CompletionEvent(
        routine_id=routine_id.strip(),
        completed_at=parse_timestamp(row["completed_at"], location),
    )


def parse(file_path: str, skip_invalid: bool = False) -> list[CompletionEvent]:
    """Parse a completions CSV export into completion events.

    With ``skip_invalid`` rows carrying a malformed timestamp are logged and
    dropped instead of aborting the whole file.
    """

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []

        events: list[CompletionEvent] = []
        for row_number, row in enumerate(reader, start=2):
            try:
                events.append(_parse_row(row, row_number))
            except InvalidTimestamp as exc:
                if not skip_invalid:
                    raise
                logger.warning("Skipping completion: %s", exc)
        return events


def _parse_routine_row(row: dict, row_number: int) -> Routine:
    location = f"Row {row_number}"
    if not row.get("id"):
        raise InvalidRecord(location, "missing required fields ['id']")

    steps: list[RoutineStep] = []
    minutes_raw = row.get("total_minutes")
    if minutes_raw not in (None, ""):
        try:
            steps.append(RoutineStep(title="total", duration_minutes=int(minutes_raw)))
        except ValueError as exc:
            raise InvalidRecord(location, "invalid total_minutes") from exc

    tags_raw = row.get("tags") or ""
    return Routine(
        routine_id=row["id"].strip(),
        title=(row.get("title") or "").strip(),
        category=RoutineCategory.parse(row.get("mode")),
        steps=steps,
        tags=[tag.strip() for tag in tags_raw.split(";") if tag.strip()],
    )


def parse_routines(file_path: str) -> list[Routine]:
    """Parse a routine directory CSV (``id,title,mode[,total_minutes,tags]``)."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return [_parse_routine_row(row, row_number) for row_number, row in enumerate(reader, start=2)]
