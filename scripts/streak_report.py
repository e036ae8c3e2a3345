"""Build a streak report from exported completions and routines."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from routine_streaks.adapters import csv_adapter, json_adapter
from routine_streaks.config import get_settings
from routine_streaks.month_view import month_day_status
from routine_streaks.routines import build_directory
from routine_streaks.streaks import compute_both_streaks

logger = logging.getLogger("streak_report")


def _load(path: Path, kind: str, skip_invalid: bool = False):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        adapter = csv_adapter
    elif suffix == ".json":
        adapter = json_adapter
    else:
        raise ValueError("Unsupported input format, expected .csv or .json")
    if kind == "routines":
        return adapter.parse_routines(str(path))
    return adapter.parse(str(path), skip_invalid=skip_invalid)


def _parse_month(value: str) -> tuple[int, int]:
    try:
        year, month = (int(part) for part in value.split("-"))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("expected YYYY-MM") from exc
    return year, month


def build_report(args: argparse.Namespace) -> dict:
    settings = get_settings()
    events = _load(Path(args.completions), "completions", skip_invalid=args.skip_invalid)
    routines = _load(Path(args.routines), "routines")
    directory = build_directory(routines)
    today = args.today or settings.current_date()

    logger.info("Loaded %d completions and %d routines", len(events), len(routines))
    streaks = compute_both_streaks(events, directory, today=today)

    report = {
        "today": today.isoformat(),
        "morning_streak": streaks.morning_streak,
        "evening_streak": streaks.evening_streak,
        "total_streak": streaks.total,
    }
    if args.month:
        year, month = args.month
        report["calendar"] = [
            {**asdict(status), "day": status.day.isoformat()}
            for status in month_day_status(events, directory, year, month)
        ]
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Compute morning/evening routine streaks")
    parser.add_argument("--completions", required=True, help="Path to CSV/JSON completions export")
    parser.add_argument("--routines", required=True, help="Path to CSV/JSON routine directory")
    parser.add_argument("--today", type=date.fromisoformat, default=None, help="Override today (YYYY-MM-DD)")
    parser.add_argument("--month", type=_parse_month, default=None, help="Include calendar for YYYY-MM")
    parser.add_argument("--skip-invalid", action="store_true", help="Drop completions with bad timestamps")
    parser.add_argument("--output", default="outputs/streak_report.json", help="Where to save the report")
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as exc:
        logging.basicConfig()
        logger.error("Invalid settings: %s", exc)
        return 2

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        report = build_report(args)
    except (ValueError, OSError) as exc:
        logger.error("Could not build report: %s", exc)
        return 2

    print(json.dumps(report, indent=2))

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    logger.info("Saved streak report to %s", out_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
