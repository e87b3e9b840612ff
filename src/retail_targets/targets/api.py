"""Public API for today/month target metrics.

This module turns already-loaded sales and a month goal into the figures the
dashboard shows. Like the rest of ``retail_targets.targets`` it:

- does NOT read or write any files,
- does NOT call any upstream API,
- MAY log progress via the logging module.

Loading sales (see ``retail_targets.sources``) and goals
(see ``retail_targets.stores``) is the caller's job; ``fetch_window`` tells
the caller which date range to load.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from retail_targets.config import TargetConfig
from retail_targets.targets.calendar import (
    add_months,
    date_key,
    iter_days,
    local_today,
    month_bounds,
    round2,
)
from retail_targets.targets.history import build_historical_rows
from retail_targets.targets.scaling import build_scaled_month_targets
from retail_targets.targets.smart import build_smart_month_targets

logger = logging.getLogger(__name__)

SCOPES = ("today", "month")


@dataclass
class TodayMetrics:
    """Today's actual sales against today's smart target.

    Attributes:
        actual_today: Sales so far today.
        target_today: Today's target (its scaled baseline, locked for the day).
        month_goal: Goal for the current month, or None.
        remaining: Amount still needed today, never negative.
        pct: actual / target as a percentage (0 when the target is 0).
        updated_at: ISO timestamp of ``now``.
    """

    actual_today: float
    target_today: float
    month_goal: Optional[float]
    remaining: float
    pct: float
    updated_at: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class DayMetrics:
    """Actual and smart target for one day of the month."""

    date: str
    actual: float
    target: float


@dataclass
class MonthMetrics:
    """Month-to-date performance and the per-day target plan.

    Attributes:
        month_goal: Goal for the month, or None.
        mtd_actual: Sum of actual sales up to and including today.
        mtd_target: Sum of smart targets up to and including today.
        ahead_behind: mtd_actual - mtd_target (positive means ahead).
        days: One entry per calendar day of the month.
        updated_at: ISO timestamp of ``now``.
    """

    month_goal: Optional[float]
    mtd_actual: float
    mtd_target: float
    ahead_behind: float
    days: List[DayMetrics] = field(default_factory=list)
    updated_at: str = ""

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)

    def to_frame(self) -> pd.DataFrame:
        """Per-day actuals and targets as a DataFrame (columns: date, actual, target)."""
        if not self.days:
            return pd.DataFrame(columns=["date", "actual", "target"])
        df = pd.DataFrame([asdict(day) for day in self.days])
        df["date"] = pd.to_datetime(df["date"])
        return df


def _isoformat(now: date | datetime) -> str:
    return now.isoformat()


def fetch_window(now: date | datetime, config: TargetConfig, scope: str) -> Tuple[date, date]:
    """Date range ``[start, end_exclusive)`` of sales needed for a metrics scope.

    Args:
        now: Current instant or calendar day.
        config: Engine configuration (timezone, history_months).
        scope: "today" (history counted back from today) or "month"
            (history counted back from the month start).

    Returns:
        (start, end_exclusive). The end is always the next month's first day.

    Raises:
        ValueError: If scope is not "today" or "month".
    """
    if scope not in SCOPES:
        raise ValueError(f"Invalid scope '{scope}'. Must be 'today' or 'month'.")
    today = local_today(now, config.tz)
    month_start, next_month_start = month_bounds(today)
    anchor = today if scope == "today" else month_start
    return add_months(anchor, -config.history_months), next_month_start


def _month_targets(
    sales_map: Mapping[str, float],
    month_goal: Optional[float],
    now: date | datetime,
    history_cutoff: date,
    config: TargetConfig,
) -> Dict[str, float]:
    today = local_today(now, config.tz)
    month_start, next_month_start = month_bounds(today)
    historical_rows = build_historical_rows(sales_map, history_cutoff)
    scaled = build_scaled_month_targets(
        month_start, next_month_start, historical_rows, month_goal, config
    )
    return build_smart_month_targets(
        month_start=month_start,
        next_month_start=next_month_start,
        now=today,
        base_targets=scaled,
        sales_map=sales_map,
        month_goal=month_goal,
        config=config,
    )


def compute_today_metrics(
    sales_map: Mapping[str, float],
    month_goal: Optional[float],
    now: date | datetime,
    config: Optional[TargetConfig] = None,
) -> TodayMetrics:
    """Compute today's actual vs. target.

    Historical rows are every day strictly before today.

    Args:
        sales_map: Merged sales covering ``fetch_window(now, config, "today")``.
        month_goal: Goal for the current month, or None.
        now: Current instant or calendar day.
        config: Engine configuration. Defaults to TargetConfig().

    Returns:
        TodayMetrics.
    """
    config = config or TargetConfig()
    today = local_today(now, config.tz)
    targets = _month_targets(sales_map, month_goal, now, today, config)

    key = date_key(today)
    actual = round2(float(sales_map.get(key) or 0))
    target = round2(float(targets.get(key) or 0))
    remaining = round2(max(target - actual, 0))
    pct = round2(actual / target * 100) if target > 0 else 0

    logger.info("Today %s: actual=%.2f target=%.2f", key, actual, target)
    return TodayMetrics(
        actual_today=actual,
        target_today=target,
        month_goal=month_goal,
        remaining=remaining,
        pct=pct,
        updated_at=_isoformat(now),
    )


def compute_month_metrics(
    sales_map: Mapping[str, float],
    month_goal: Optional[float],
    now: date | datetime,
    config: Optional[TargetConfig] = None,
) -> MonthMetrics:
    """Compute month-to-date performance and the per-day plan.

    Historical rows are every day strictly before the month start, so the
    plan does not shift with this month's own sales; only the smart
    redistribution reacts to them.

    Args:
        sales_map: Merged sales covering ``fetch_window(now, config, "month")``.
        month_goal: Goal for the current month, or None.
        now: Current instant or calendar day.
        config: Engine configuration. Defaults to TargetConfig().

    Returns:
        MonthMetrics.
    """
    config = config or TargetConfig()
    today = local_today(now, config.tz)
    month_start, next_month_start = month_bounds(today)
    targets = _month_targets(sales_map, month_goal, now, month_start, config)

    days: List[DayMetrics] = []
    mtd_actual = 0.0
    mtd_target = 0.0
    for day in iter_days(month_start, next_month_start):
        key = date_key(day)
        actual = round2(float(sales_map.get(key) or 0))
        target = round2(float(targets.get(key) or 0))
        if day <= today:
            mtd_actual += actual
            mtd_target += target
        days.append(DayMetrics(date=key, actual=actual, target=target))

    logger.info(
        "Month %s: mtd_actual=%.2f mtd_target=%.2f goal=%s",
        month_start.strftime("%Y-%m"),
        mtd_actual,
        mtd_target,
        month_goal,
    )
    return MonthMetrics(
        month_goal=month_goal,
        mtd_actual=round2(mtd_actual),
        mtd_target=round2(mtd_target),
        ahead_behind=round2(mtd_actual - mtd_target),
        days=days,
        updated_at=_isoformat(now),
    )
