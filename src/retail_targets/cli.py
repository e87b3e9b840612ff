"""Command-line interface for retail-targets.

Examples:
  # Today's target and progress
  retail-targets today

  # Month plan, also written to CSV
  retail-targets month --csv february.csv

  # Everything sold on one day
  retail-targets day 2026-02-10

  # Goals
  retail-targets goal set 12000 --month 2026-02
  retail-targets goal set --clear --month 2026-02

  # Manual sales
  retail-targets entries add 25 --source cash --date 2026-02-10
  retail-targets entries list --from 2026-02-01 --to 2026-02-28

  # Back-fill history from a till export
  retail-targets --sales-csv till_export.csv month

Environment: see retail_targets.config.Settings.from_env.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import pandas as pd

from retail_targets.config import Settings
from retail_targets.exceptions import RetailTargetsError
from retail_targets.service import DashboardService
from retail_targets.sources.csv_file import CsvSalesSource
from retail_targets.stores.manual_entries import VALID_SOURCES

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="retail-targets", description="Daily and monthly sales targets.")
    p.add_argument("--env-file", type=Path, help="Optional .env file with settings")
    p.add_argument("--sales-csv", type=Path, help="Extra sales CSV (columns: date, amount)")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("today", help="Today's actual vs. target")

    month = sub.add_parser("month", help="Month-to-date performance and per-day targets")
    month.add_argument("--csv", type=Path, help="Also write per-day targets to this CSV")

    day = sub.add_parser("day", help="Items sold on one day")
    day.add_argument("date", help="YYYY-MM-DD")

    goal = sub.add_parser("goal", help="Read or set the month goal")
    goal_sub = goal.add_subparsers(dest="goal_command", required=True)
    goal_get = goal_sub.add_parser("get")
    goal_get.add_argument("--month", help="YYYY-MM (default: current month)")
    goal_set = goal_sub.add_parser("set")
    goal_set.add_argument("--month", help="YYYY-MM (default: current month)")
    g = goal_set.add_mutually_exclusive_group(required=True)
    g.add_argument("amount", nargs="?", type=float, help="Goal amount")
    g.add_argument("--clear", action="store_true", help="Remove the goal")

    entries = sub.add_parser("entries", help="Manual sales entries")
    entries_sub = entries.add_subparsers(dest="entries_command", required=True)
    e_list = entries_sub.add_parser("list")
    e_list.add_argument("--from", dest="date_from")
    e_list.add_argument("--to", dest="date_to")
    e_list.add_argument("--limit", type=int, default=200)
    e_add = entries_sub.add_parser("add")
    e_add.add_argument("amount", type=float)
    e_add.add_argument("--source", required=True, choices=VALID_SOURCES)
    e_add.add_argument("--date", dest="sale_date", help="YYYY-MM-DD (default: today)")
    e_add.add_argument("--description")
    e_add.add_argument("--note")
    e_delete = entries_sub.add_parser("delete")
    e_delete.add_argument("entry_id")

    return p


def _run(args: argparse.Namespace, service: DashboardService) -> Any:
    if args.command == "today":
        return service.today()

    if args.command == "month":
        payload = service.month()
        if args.csv:
            pd.DataFrame(payload["days"]).to_csv(args.csv, index=False)
            logger.info("Wrote %d days to %s", len(payload["days"]), args.csv)
        return payload

    if args.command == "day":
        return service.day(args.date)

    if args.command == "goal":
        if args.goal_command == "get":
            return service.get_goal(args.month)
        return service.set_goal(args.month, None if args.clear else args.amount)

    if args.entries_command == "list":
        return [e.to_dict() for e in service.list_entries(args.date_from, args.date_to, args.limit)]
    if args.entries_command == "add":
        return service.add_entry(
            amount=args.amount,
            source=args.source,
            sale_date=args.sale_date,
            description=args.description,
            note=args.note,
        ).to_dict()
    removed = service.delete_entry(args.entry_id)
    return removed.to_dict() if removed is not None else {"id": args.entry_id}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run one command and print its result as JSON."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    try:
        settings = Settings.from_env(args.env_file)
        extra = [CsvSalesSource(args.sales_csv)] if args.sales_csv else []
        service = DashboardService.from_settings(settings, extra)
        result = _run(args, service)
    except RetailTargetsError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
