"""Demo script for routine-streaks."""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from routine_streaks.adapters.csv_adapter import parse
from routine_streaks.adapters.json_adapter import parse_routines
from routine_streaks.routines import total_minutes
from routine_streaks.streaks import compute_streaks_from_routines


def main() -> None:
    events = parse("examples/sample_completions.csv")
    routines = parse_routines("examples/sample_routines.json")
    result = compute_streaks_from_routines(events, routines, today=date(2024, 3, 10))
    print("AM streak:", result.morning_streak)
    print("PM streak:", result.evening_streak)
    print("Total:", result.total)
    for routine in routines:
        print(f"  {routine.title} ({routine.category.value}): {total_minutes(routine)} min")


if __name__ == "__main__":
    main()
