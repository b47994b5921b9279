"""Re-run attendance finalization for a range of past dates.

Usage: python scripts/backfill.py 2024-01-01 2024-01-31 [--employee 42]
"""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.attendance_finalization.attendance_finalization.common.datetime_utils import daterange, parse_iso_date
from src.attendance_finalization.attendance_finalization.container import build_container
from src.attendance_finalization.attendance_finalization.finalization.model import DaySkipped


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("start", type=parse_iso_date, help="first date (YYYY-MM-DD)")
    parser.add_argument("end", type=parse_iso_date, help="last date, inclusive (YYYY-MM-DD)")
    parser.add_argument("--employee", type=int, default=None, help="only finalize this employee id")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=settings.DB_CONFIG, finalization_config=getattr(settings, "FINALIZATION", None))
    orchestrator = container.orchestrator
    try:
        if args.employee is not None:
            results = [orchestrator.finalize_employee(args.employee, day) for day in daterange(args.start, args.end)]
            payload = [r.as_dict() for r in results]
        else:
            results = orchestrator.finalize_range(args.start, args.end)
            payload = [
                r.as_dict() if isinstance(r, DaySkipped) else {"date": day.isoformat(), **r.as_dict()}
                for day, r in zip(daterange(args.start, args.end), results)
            ]
    finally:
        container.dispatcher.shutdown(wait=True)

    print(json.dumps(payload, indent=2))
    errors = sum(item.get("errors", 0) for item in payload)
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
