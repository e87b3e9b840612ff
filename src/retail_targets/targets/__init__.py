"""Sales-target engine.

Pure functions that turn a history of daily sales into per-day targets:

    >>> from datetime import date
    >>> from retail_targets.config import TargetConfig
    >>> from retail_targets.targets import (
    ...     build_historical_rows,
    ...     build_scaled_month_targets,
    ...     build_smart_month_targets,
    ...     merge_sales_maps,
    ... )
    >>>
    >>> config = TargetConfig(timezone="Europe/London", growth_pct=5)
    >>> sales = merge_sales_maps(platform_sales, manual_sales)
    >>> rows = build_historical_rows(sales, date(2026, 2, 1))
    >>> scaled = build_scaled_month_targets(
    ...     date(2026, 2, 1), date(2026, 3, 1), rows, 12000, config
    ... )
    >>> smart = build_smart_month_targets(
    ...     date(2026, 2, 1), date(2026, 3, 1), date(2026, 2, 10),
    ...     scaled, sales, 12000, config,
    ... )

All functions are synchronous, side-effect free and safe to call
concurrently.
"""

from retail_targets.targets.api import (
    DayMetrics,
    MonthMetrics,
    TodayMetrics,
    compute_month_metrics,
    compute_today_metrics,
    fetch_window,
)
from retail_targets.targets.calendar import round2
from retail_targets.targets.estimator import compute_target_for_date, is_closed_day
from retail_targets.targets.history import (
    HistoricalRow,
    build_historical_rows,
    merge_sales_maps,
    sales_map_from_frame,
)
from retail_targets.targets.scaling import build_scaled_month_targets
from retail_targets.targets.smart import build_smart_month_targets

__all__ = [
    "DayMetrics",
    "HistoricalRow",
    "MonthMetrics",
    "TodayMetrics",
    "build_historical_rows",
    "build_scaled_month_targets",
    "build_smart_month_targets",
    "compute_month_metrics",
    "compute_target_for_date",
    "compute_today_metrics",
    "fetch_window",
    "is_closed_day",
    "merge_sales_maps",
    "round2",
    "sales_map_from_frame",
]
