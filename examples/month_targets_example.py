"""Example: Month Targets from a Sales Export

This example builds the current month's plan from a CSV export of daily
sales (one row per sale or per day, with 'date' and 'amount' columns).

Every open day gets a baseline from the same month and weekday of last year
(falling back to broader averages), the baselines are scaled to the month
goal, and days after today absorb whatever is still missing.

Prerequisites:
- A CSV export such as data/daily_sales.csv
"""

from datetime import date
from pathlib import Path

import pandas as pd

from retail_targets.config import TargetConfig
from retail_targets.targets import (
    compute_month_metrics,
    compute_today_metrics,
    sales_map_from_frame,
)

# Modify this path to point to your sales export
data_file = Path("data/daily_sales.csv")
month_goal = 12000.0

print("=" * 80)
print("Month targets from historical sales")
print("=" * 80)

if data_file.exists():
    sales_df = pd.read_csv(data_file)
    print(f"\nLoaded {len(sales_df)} rows from {data_file}")

    sales = sales_map_from_frame(sales_df)
    print(f"Days with sales: {len(sales)}")

    config = TargetConfig(
        timezone="Europe/London",
        growth_pct=5,  # aim 5% above last year
    )
    today = date.today()

    today_metrics = compute_today_metrics(sales, month_goal, today, config)
    print("\nToday:")
    for key, value in today_metrics.to_dict().items():
        print(f"  {key}: {value}")

    month_metrics = compute_month_metrics(sales, month_goal, today, config)
    print(f"\nMonth to date: {month_metrics.mtd_actual:.2f} of {month_metrics.mtd_target:.2f}")
    print("\nPlan:")
    print(month_metrics.to_frame().to_string(index=False))
else:
    print(f"\nData file not found: {data_file}")
    print("Export your daily sales to that path (columns: date, amount) and re-run.")
