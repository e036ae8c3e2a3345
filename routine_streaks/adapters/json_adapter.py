"""JSON adapter for completion history and routine directories."""

from __future__ import annotations

import json
import logging

from routine_streaks.errors import InvalidRecord, InvalidTimestamp
from routine_streaks.schema import CompletionEvent, Routine, RoutineCategory, RoutineStep
from routine_streaks.streaks import parse_timestamp

logger = logging.getLogger(__name__)


def _load_list(file_path: str) -> list:
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise InvalidRecord("Payload", "JSON payload must be a list of objects")
    return payload


def _parse_item(item, index: int) -> CompletionEvent:
    location = f"Item {index}"
    if not isinstance(item, dict):
        raise InvalidRecord(location, "expected an object")

    routine_id = item.get("routine_id") or item.get("roadmap_id")
    missing = [] if routine_id else ["routine_id"]
    if not item.get("completed_at"):
        missing.append("completed_at")
    if missing:
        raise InvalidRecord(location, f"missing required fields {missing}")

    return CompletionEvent(
        routine_id=str(routine_id).strip(),
        completed_at=parse_timestamp(item["completed_at"], location),
    )


def parse(file_path: str, skip_invalid: bool = False) -> list[CompletionEvent]:
    """Parse a completions JSON export into completion events."""

    events: list[CompletionEvent] = []
    for index, item in enumerate(_load_list(file_path), start=1):
        try:
            events.append(_parse_item(item, index))
        except InvalidTimestamp as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping completion: %s", exc)
    return events


def _parse_step(step, location: str) -> RoutineStep:
    if not isinstance(step, dict):
        raise InvalidRecord(location, "step must be an object")
    duration_raw = step.get("duration_minutes")
    try:
        duration = int(duration_raw) if duration_raw is not None else 0
    except (TypeError, ValueError) as exc:
        raise InvalidRecord(location, "invalid duration_minutes") from exc
    return RoutineStep(title=str(step.get("title") or ""), duration_minutes=duration)


def _parse_routine(item, index: int) -> Routine:
    location = f"Item {index}"
    if not isinstance(item, dict) or not item.get("id"):
        raise InvalidRecord(location, "missing required fields ['id']")

    steps_raw = item.get("roadmap_steps") or item.get("steps") or []
    return Routine(
        routine_id=str(item["id"]).strip(),
        title=str(item.get("title") or "").strip(),
        category=RoutineCategory.parse(item.get("mode")),
        steps=[_parse_step(step, location) for step in steps_raw],
        tags=[str(tag).strip() for tag in item.get("tags") or []],
    )


def parse_routines(file_path: str) -> list[Routine]:
    """Parse a routine directory export (``roadmaps`` rows with nested steps)."""

    return [_parse_routine(item, i) for i, item in enumerate(_load_list(file_path), start=1)]
