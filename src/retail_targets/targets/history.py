"""Sales history aggregation.

A *sales map* is a plain ``dict`` from ``YYYY-MM-DD`` day keys to amounts.
Independent sources (platform orders, the manual ledger, CSV exports) each
produce one; they are merged additively and then cut into historical rows
for the target estimator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Mapping

import pandas as pd

from retail_targets.targets.calendar import date_key, parse_date_key, round2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoricalRow:
    """One observed day of sales.

    Attributes:
        date: Calendar day the sales belong to.
        amount: Total sales for that day.
    """

    date: date
    amount: float


def merge_sales_maps(*sales_maps: Mapping[str, float]) -> dict[str, float]:
    """Merge sales maps additively.

    Every key present in any input appears in the result with
    ``round2(sum of the amounts for that key)``; a key missing from a map
    counts as 0.

    Examples:
        >>> merge_sales_maps({"2026-02-09": 10}, {"2026-02-09": 5, "2026-02-10": 3})
        {'2026-02-09': 15.0, '2026-02-10': 3.0}
    """
    totals: dict[str, float] = {}
    for sales_map in sales_maps:
        for key, amount in sales_map.items():
            totals[key] = totals.get(key, 0.0) + float(amount or 0)
    return {key: round2(total) for key, total in totals.items()}


def build_historical_rows(sales_map: Mapping[str, float], before: date) -> list[HistoricalRow]:
    """Turn a sales map into rows strictly before ``before``.

    Args:
        sales_map: Day key -> amount.
        before: Cutoff day (exclusive).

    Returns:
        One HistoricalRow per day key earlier than the cutoff, in no
        particular order.
    """
    rows = []
    for key, amount in sales_map.items():
        day = parse_date_key(key)
        if day < before:
            rows.append(HistoricalRow(date=day, amount=float(amount or 0)))
    logger.debug("Built %d historical rows before %s", len(rows), before)
    return rows


def sales_map_from_frame(
    df: pd.DataFrame,
    date_column: str = "date",
    amount_column: str = "amount",
) -> dict[str, float]:
    """Build a sales map from a DataFrame of sales lines or daily totals.

    Rows are grouped by calendar day of ``date_column`` and their
    ``amount_column`` summed. Rows with an unparseable date are dropped.

    Args:
        df: Source data.
        date_column: Column holding a date, datetime or date string.
        amount_column: Column holding the monetary amount.

    Returns:
        Day key -> round2(sum of amounts).

    Raises:
        KeyError: If a required column is missing.
    """
    missing = [c for c in (date_column, amount_column) if c not in df.columns]
    if missing:
        raise KeyError(f"Missing required columns: {missing}")

    if df.empty:
        return {}

    frame = pd.DataFrame(
        {
            "day": pd.to_datetime(df[date_column], errors="coerce", format="mixed").dt.date,
            "amount": pd.to_numeric(df[amount_column], errors="coerce").fillna(0.0),
        }
    ).dropna(subset=["day"])

    dropped = len(df) - len(frame)
    if dropped:
        logger.warning("Dropped %d rows with unparseable %r values", dropped, date_column)

    daily = frame.groupby("day")["amount"].sum()
    return {date_key(day): round2(float(total)) for day, total in daily.items()}
