"""retail-targets - daily and monthly sales targets for a small shop.

Sales from the e-commerce platform and a manual ledger are merged into one
daily history. From it, every day of the month gets a baseline target
(weekday/month averages), the baselines are scaled to the month goal, and as
the month progresses the shortfall or surplus is redistributed over the
remaining open days ("smart targets").

Module Structure:
    retail_targets.targets: Pure target engine and today/month metrics
    retail_targets.sources: Sales sources (Shopify, CSV exports)
    retail_targets.stores: JSON stores for month goals and manual entries
    retail_targets.service: Sources + stores + engine + cache
    retail_targets.config: TargetConfig and Settings

Quick Start:
    >>> from retail_targets import Settings
    >>> from retail_targets.service import DashboardService
    >>>
    >>> service = DashboardService.from_settings(Settings.from_env(".env"))
    >>> service.set_goal("2026-02", 12000)
    >>> service.today()["target_today"]
"""

__version__ = "0.1.0"

from retail_targets.config import Settings, TargetConfig
from retail_targets.exceptions import (
    ConfigError,
    EntryNotFoundError,
    ExtractionError,
    RetailTargetsError,
    ValidationError,
)

__all__ = [
    "ConfigError",
    "EntryNotFoundError",
    "ExtractionError",
    "RetailTargetsError",
    "Settings",
    "TargetConfig",
    "ValidationError",
    "__version__",
]
