"""Smart target redistribution.

As the month progresses, whatever is still owed against the month goal is
spread over the remaining open days, in proportion to each day's scaled
baseline. Past days and today keep their targets; today's target is locked
to its scaled baseline for the whole day so the figure on the dashboard does
not move while staff are trading.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Mapping, Optional

from retail_targets.config import TargetConfig
from retail_targets.targets.calendar import date_key, iter_days, local_today, round2
from retail_targets.targets.estimator import is_closed_day
from retail_targets.targets.scaling import has_goal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _OpenDay:
    key: str
    weight: float


def build_smart_month_targets(
    month_start: date,
    next_month_start: date,
    now: date | datetime,
    base_targets: Mapping[str, float],
    sales_map: Mapping[str, float],
    month_goal: Optional[float],
    config: Optional[TargetConfig] = None,
) -> dict[str, float]:
    """Redistribute the remaining month goal across future open days.

    Days are partitioned against today's calendar day:

    - past days add their actual sales to ``actual_past``;
    - today contributes only the amount by which its actual exceeds its
      base target (being behind today does not raise future targets);
    - future open days form the redistribution pool, weighted by their
      base target. Future closed days stay as they are.

    ``remaining = max(goal - actual_past - today_overage, 0)`` is then split
    proportionally to the weights, or evenly if every weight is 0.

    Args:
        month_start: First day of the month.
        next_month_start: First day of the following month (exclusive bound).
        now: Current instant (aware datetimes are converted to the configured
            timezone) or the current calendar day.
        base_targets: Scaled baseline targets by day key.
        sales_map: Actual sales by day key.
        month_goal: Goal for the month, or None / non-positive for no goal.
        config: Engine configuration. Defaults to TargetConfig().

    Returns:
        A new mapping. With no goal, or no open day left, it equals
        ``base_targets``; otherwise only the remaining open days differ.
    """
    config = config or TargetConfig()
    smart = dict(base_targets)
    if not has_goal(month_goal):
        return smart

    today = local_today(now, config.tz)
    actual_past = 0.0
    today_actual = 0.0
    today_base_target = 0.0
    remaining_open: list[_OpenDay] = []

    for day in iter_days(month_start, next_month_start):
        key = date_key(day)
        target = float(base_targets.get(key) or 0)
        actual = float(sales_map.get(key) or 0)

        if day < today:
            actual_past += actual
        elif day == today:
            today_actual = actual
            today_base_target = target
        elif not is_closed_day(day, config):
            remaining_open.append(_OpenDay(key=key, weight=target))

    today_overage = max(today_actual - today_base_target, 0.0)
    remaining_goal = max(month_goal - actual_past - today_overage, 0.0)
    if not remaining_open:
        return smart

    weight_sum = sum(day.weight for day in remaining_open)
    logger.debug(
        "Redistributing %.2f over %d open days (actual_past=%.2f, today_overage=%.2f)",
        remaining_goal,
        len(remaining_open),
        actual_past,
        today_overage,
    )

    if weight_sum <= 0:
        even_split = round2(remaining_goal / len(remaining_open))
        smart.update({day.key: even_split for day in remaining_open})
        return smart

    for day in remaining_open:
        smart[day.key] = round2(remaining_goal * (day.weight / weight_sum))
    return smart
