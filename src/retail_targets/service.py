"""Dashboard service: sources + stores + target engine + cache.

This is everything behind the dashboard's endpoints except HTTP itself.
Sales from every source are merged for the needed window, the month goal is
read from the goal store, metrics are computed by ``retail_targets.targets``
and cached. ``day`` lists the individual items sold on one day. When
recomputing fails, a recently expired payload is served and flagged as
delayed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from retail_targets.cache import TTLCache
from retail_targets.config import Settings
from retail_targets.sources.base import SalesSource
from retail_targets.sources.shopify import ShopifyClient, ShopifySalesSource
from retail_targets.stores.manual_entries import ManualEntry, ManualEntryStore
from retail_targets.stores.month_goals import MonthGoalStore, current_month_key
from retail_targets.targets.api import compute_month_metrics, compute_today_metrics, fetch_window
from retail_targets.targets.calendar import date_key, parse_date_key
from retail_targets.targets.history import merge_sales_maps

logger = logging.getLogger(__name__)

STALE_WARNING = "Showing cached data due to temporary upstream issues."

METRIC_CACHE_KEYS = ("today", "month")


def day_cache_key(day: str) -> str:
    return f"day:{day}"


def build_sources(
    settings: Settings,
    entry_store: ManualEntryStore,
    extra: Iterable[SalesSource] = (),
) -> list[SalesSource]:
    """Sales sources for a deployment.

    Shopify is included only when an admin token is configured; the manual
    ledger always is.
    """
    sources: list[SalesSource] = []
    if settings.shopify_token:
        client = ShopifyClient.from_settings(settings)
        sources.append(ShopifySalesSource(client, settings.net_sales_mode))
    else:
        logger.info("SHOPIFY_ADMIN_TOKEN not set; Shopify sales are not included")
    sources.append(entry_store)
    sources.extend(extra)
    return sources


class DashboardService:
    """Serve today/month metrics and manage goals and manual entries.

    Args:
        settings: Deployment settings.
        sources: Sales sources merged for every computation.
        goal_store: Month goal persistence.
        entry_store: Manual entry persistence.
        cache: Metrics cache. A fresh TTLCache by default.
        clock: Returns the current aware datetime. Defaults to now in the
            configured timezone.
    """

    def __init__(
        self,
        settings: Settings,
        sources: Sequence[SalesSource],
        goal_store: MonthGoalStore,
        entry_store: ManualEntryStore,
        cache: Optional[TTLCache] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings
        self.config = settings.target_config
        self.sources = list(sources)
        self.goal_store = goal_store
        self.entry_store = entry_store
        self.cache = cache or TTLCache()
        self._clock = clock or (lambda: datetime.now(ZoneInfo(settings.timezone)))

    @classmethod
    def from_settings(
        cls, settings: Settings, extra_sources: Iterable[SalesSource] = ()
    ) -> DashboardService:
        entry_store = ManualEntryStore(settings.manual_entries_file, settings.timezone)
        return cls(
            settings=settings,
            sources=build_sources(settings, entry_store, extra_sources),
            goal_store=MonthGoalStore(settings.month_goals_file),
            entry_store=entry_store,
        )

    # ------------------------- metrics -------------------------

    def _load_sales(self, now: datetime, scope: str) -> dict[str, float]:
        start, end = fetch_window(now, self.config, scope)
        maps = [source.daily_sales_map(start, end, self.settings.timezone) for source in self.sources]
        logger.debug("Merged %d sources for %s..%s", len(maps), start, end)
        return merge_sales_maps(*maps)

    def _cached(self, key: str, producer: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        payload = self.cache.get(key)
        stale = False
        if payload is None:
            try:
                payload = producer()
                self.cache.set(key, payload, self.settings.cache_ttl_seconds)
            except Exception as e:
                payload = self.cache.get_stale(key, self.settings.stale_cache_max_age_seconds)
                if payload is None:
                    raise
                logger.warning("Serving stale cache for %s: %s", key, e)
                stale = True

        return {**payload, "data_delayed": stale, "warning": STALE_WARNING if stale else None}

    def today(self) -> dict[str, Any]:
        """Today's actual vs. target, as the dashboard payload."""

        def produce() -> dict[str, Any]:
            now = self._clock()
            sales = self._load_sales(now, "today")
            goal = self.goal_store.get_month_goal(current_month_key(self.settings.timezone, now))
            return compute_today_metrics(sales, goal, now, self.config).to_dict()

        return self._cached("today", produce)

    def month(self) -> dict[str, Any]:
        """Month-to-date performance and per-day targets, as the dashboard payload."""

        def produce() -> dict[str, Any]:
            now = self._clock()
            sales = self._load_sales(now, "month")
            goal = self.goal_store.get_month_goal(current_month_key(self.settings.timezone, now))
            return compute_month_metrics(sales, goal, now, self.config).to_dict()

        return self._cached("month", produce)

    def day(self, day: str) -> dict[str, Any]:
        """Items sold on one day across every source, newest first.

        Raises:
            ValidationError: If day is not a YYYY-MM-DD key.
        """
        parsed = parse_date_key(str(day or "").strip())
        key = date_key(parsed)

        def produce() -> dict[str, Any]:
            items = [
                item
                for source in self.sources
                for item in source.daily_items(parsed, self.settings.timezone)
            ]
            items.sort(key=lambda item: str(item.sold_at), reverse=True)
            return {
                "date": key,
                "items": [item.to_dict() for item in items],
                "updated_at": self._clock().isoformat(),
            }

        return self._cached(day_cache_key(key), produce)

    def invalidate_metrics(self, *days: str) -> None:
        """Drop cached today/month payloads and the drill-downs of ``days``."""
        for key in METRIC_CACHE_KEYS:
            self.cache.delete(key)
        for day in days:
            self.cache.delete(day_cache_key(day))

    # ------------------------- goals -------------------------

    def get_goal(self, month: Optional[str] = None) -> dict[str, Any]:
        month = month or current_month_key(self.settings.timezone, self._clock())
        return {"month": month, "goal": self.goal_store.get_month_goal(month)}

    def set_goal(self, month: Optional[str], goal: Optional[float]) -> dict[str, Any]:
        month = month or current_month_key(self.settings.timezone, self._clock())
        saved = self.goal_store.set_month_goal(month, goal)
        self.invalidate_metrics()
        return {"month": month, "goal": saved}

    # ------------------------- manual entries -------------------------

    def list_entries(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[ManualEntry]:
        return self.entry_store.list_entries(date_from, date_to, limit)

    def add_entry(self, **fields: Any) -> ManualEntry:
        entry = self.entry_store.create_entry(**fields)
        self.invalidate_metrics(entry.date)
        return entry

    def delete_entry(self, entry_id: str) -> Optional[ManualEntry]:
        entry = self.entry_store.delete_entry(entry_id)
        self.invalidate_metrics(*([entry.date] if entry is not None else []))
        return entry
