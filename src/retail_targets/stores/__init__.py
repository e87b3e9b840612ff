"""JSON file stores for month goals and manual sales entries."""

from retail_targets.stores.manual_entries import VALID_SOURCES, ManualEntry, ManualEntryStore
from retail_targets.stores.month_goals import MonthGoalStore, current_month_key

__all__ = [
    "VALID_SOURCES",
    "ManualEntry",
    "ManualEntryStore",
    "MonthGoalStore",
    "current_month_key",
]
