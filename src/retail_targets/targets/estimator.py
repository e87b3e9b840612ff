"""Baseline target estimator.

Produces the unscaled expected sales for a single day from historical rows,
falling back from the most specific signal to the most general one:

1. same month and weekday, previous year
2. same month and weekday, any year
3. same weekday, any month
4. all rows
"""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, Optional, Sequence

from retail_targets.config import TargetConfig
from retail_targets.targets.history import HistoricalRow


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def _is_signal(value: float) -> bool:
    return bool(value) and not math.isnan(value)


def is_closed_day(d: date, config: Optional[TargetConfig] = None) -> bool:
    """True if the business does not trade on ``d``'s weekday."""
    closed_weekday = config.closed_weekday if config is not None else 7
    return d.isoweekday() == closed_weekday


def compute_target_for_date(
    target_date: date,
    historical_rows: Iterable[HistoricalRow],
    config: Optional[TargetConfig] = None,
) -> float:
    """Estimate the baseline (unscaled) sales target for one day.

    The first non-zero average in the fallback order wins. The result is
    multiplied by ``1 + growth_pct / 100`` and never negative. Closed days
    always get 0.

    Args:
        target_date: Day to estimate.
        historical_rows: Observed days. Whatever cutoff they respect is the
            caller's business; every row given is used.
        config: Growth percentage and closed weekday. Defaults to TargetConfig().

    Returns:
        Non-negative baseline amount (not rounded).

    Examples:
        >>> compute_target_for_date(date(2026, 2, 9), [])
        0.0
    """
    config = config or TargetConfig()
    if is_closed_day(target_date, config):
        return 0.0

    rows = list(historical_rows)
    weekday = target_date.isoweekday()
    same_weekday = [row for row in rows if row.date.isoweekday() == weekday]
    same_month_weekday = [row for row in same_weekday if row.date.month == target_date.month]
    prev_year_weekday = [row for row in same_month_weekday if row.date.year == target_date.year - 1]

    candidates = (
        _mean([row.amount for row in prev_year_weekday]),
        _mean([row.amount for row in same_month_weekday]),
        _mean([row.amount for row in same_weekday]),
    )
    base = next((value for value in candidates if _is_signal(value)), None)
    if base is None:
        base = _mean([row.amount for row in rows])
        if math.isnan(base):
            base = 0.0

    return max(0.0, base * (1 + config.growth_pct / 100))
