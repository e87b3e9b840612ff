"""Month target scaler.

Baselines from weekday history rarely add up to the month's goal. Scaling
every day by the same factor keeps the shape across the month while making
the total match.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from retail_targets.config import TargetConfig
from retail_targets.targets.calendar import date_key, iter_days, round2
from retail_targets.targets.estimator import compute_target_for_date
from retail_targets.targets.history import HistoricalRow

logger = logging.getLogger(__name__)


def has_goal(month_goal: Optional[float]) -> bool:
    """A goal counts as set only when it is a positive number."""
    return month_goal is not None and month_goal > 0


def build_scaled_month_targets(
    month_start: date,
    next_month_start: date,
    historical_rows: Sequence[HistoricalRow],
    month_goal: Optional[float],
    config: Optional[TargetConfig] = None,
) -> dict[str, float]:
    """Build one month of baseline targets scaled to the month goal.

    Every day in ``[month_start, next_month_start)`` is estimated from the same
    ``historical_rows``. Baselines are rounded to cents, summed, and each is
    multiplied by ``month_goal / total`` when a goal is set and the total is
    positive (otherwise by 1), then rounded again.

    Args:
        month_start: First day of the month.
        next_month_start: First day of the following month (exclusive bound).
        historical_rows: Fixed lookback window shared by every day.
        month_goal: Goal for the month, or None / non-positive for no goal.
        config: Engine configuration. Defaults to TargetConfig().

    Returns:
        Day key -> scaled baseline target.
    """
    config = config or TargetConfig()
    baselines = [
        (date_key(day), round2(compute_target_for_date(day, historical_rows, config)))
        for day in iter_days(month_start, next_month_start)
    ]

    total_base = sum(base for _, base in baselines)
    scale = month_goal / total_base if has_goal(month_goal) and total_base > 0 else 1
    logger.debug(
        "Scaling %d days from %s: total_base=%.2f goal=%s scale=%.6f",
        len(baselines),
        month_start,
        total_base,
        month_goal,
        scale,
    )

    return {key: round2(base * scale) for key, base in baselines}
