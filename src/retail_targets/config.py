"""Unified configuration for retail-targets.

Two configuration objects live here:

- ``TargetConfig``: the small, frozen set of knobs the target engine reads
  (growth percentage, closed weekday, timezone). It is passed explicitly into
  every engine call so several configurations can coexist in one process.
- ``Settings``: deployment settings (file locations, Shopify credentials,
  cache lifetimes), usually built from environment variables.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import dotenv_values

from retail_targets.exceptions import ConfigError

NET_SALES_MODES = ("subtotal_ex_tax_ship", "total")

DEFAULT_TIMEZONE = "Europe/London"


@dataclass(frozen=True)
class TargetConfig:
    """Parameters for target computation.

    Attributes:
        timezone: IANA zone used to resolve "today" and day boundaries.
        growth_pct: Percentage applied to every baseline (e.g. 10 -> x1.10).
        closed_weekday: ISO weekday the business never trades (7 = Sunday).
        net_sales_mode: How platform orders are valued ("subtotal_ex_tax_ship" or "total").
        history_months: Lookback window, in months, for historical rows.
    """

    timezone: str = DEFAULT_TIMEZONE
    growth_pct: float = 0.0
    closed_weekday: int = 7
    net_sales_mode: str = "subtotal_ex_tax_ship"
    history_months: int = 12

    def __post_init__(self) -> None:
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown timezone: {self.timezone!r}") from e
        if not 1 <= self.closed_weekday <= 7:
            raise ConfigError(
                f"closed_weekday must be an ISO weekday (1-7), got {self.closed_weekday}"
            )
        if self.net_sales_mode not in NET_SALES_MODES:
            raise ConfigError(
                f"Invalid net_sales_mode {self.net_sales_mode!r}. "
                f"Must be one of: {', '.join(NET_SALES_MODES)}"
            )
        if self.history_months < 0:
            raise ConfigError(f"history_months must be >= 0, got {self.history_months}")

    @property
    def tz(self) -> ZoneInfo:
        """The configured timezone as a ZoneInfo."""
        return ZoneInfo(self.timezone)


def _normalize_domain(domain: str) -> str:
    domain = re.sub(r"^https?://", "", domain.strip())
    return re.sub(r"/+$", "", domain)


@dataclass
class Settings:
    """All deployment settings used by the service and the CLI.

    Attributes:
        timezone: IANA zone for day boundaries.
        manual_entries_file: JSON file holding manually logged sales.
        month_goals_file: JSON file holding per-month goals.
        shopify_domain: Store domain, e.g. "example.myshopify.com".
        shopify_token: Admin API access token. Empty disables the Shopify source.
        shopify_api_version: Admin API version segment of the GraphQL URL.
        history_months: Months of history loaded for baselines.
        net_sales_mode: How Shopify orders are valued.
        target_growth_pct: Growth percentage applied to baselines.
        cache_ttl_seconds: Lifetime of a fresh cached metrics payload.
        stale_cache_max_age_seconds: How long past expiry a payload may be served on errors.
        http_timeout: Default timeout (seconds) for upstream requests.
        http_retries: Retry attempts for upstream requests.
    """

    timezone: str = DEFAULT_TIMEZONE
    manual_entries_file: Path = Path(".manual-entries.json")
    month_goals_file: Path = Path(".shopify-month-goals.json")
    shopify_domain: str = "example.myshopify.com"
    shopify_token: str = ""
    shopify_api_version: str = "2024-10"
    history_months: int = 12
    net_sales_mode: str = "subtotal_ex_tax_ship"
    target_growth_pct: float = 0.0
    cache_ttl_seconds: float = 60.0
    stale_cache_max_age_seconds: float = 3600.0
    http_timeout: float = 15.0
    http_retries: int = 2

    @classmethod
    def from_env(
        cls,
        env_file: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Settings:
        """Create Settings from environment variables.

        Values from ``env_file`` (a dotenv file) are used as defaults; real
        environment variables win over them.

        Args:
            env_file: Optional path to a .env file.
            environ: Mapping to read instead of os.environ (mainly for tests).

        Returns:
            Settings instance.

        Raises:
            ConfigError: If a numeric setting cannot be parsed.
        """
        values: dict[str, str] = {}
        if env_file is not None:
            values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        values.update(os.environ if environ is None else environ)

        def number(key: str, default: float, kind: type = float):
            raw = values.get(key)
            if raw is None or raw == "":
                return kind(default)
            try:
                return kind(raw)
            except ValueError as e:
                raise ConfigError(f"{key} must be a number, got {raw!r}") from e

        return cls(
            timezone=values.get("TZ") or DEFAULT_TIMEZONE,
            manual_entries_file=Path(values.get("MANUAL_ENTRIES_FILE") or ".manual-entries.json"),
            month_goals_file=Path(
                values.get("SHOPIFY_MONTH_GOALS_FILE") or ".shopify-month-goals.json"
            ),
            shopify_domain=_normalize_domain(
                values.get("SHOPIFY_STORE_DOMAIN") or "example.myshopify.com"
            ),
            shopify_token=values.get("SHOPIFY_ADMIN_TOKEN", ""),
            shopify_api_version=values.get("SHOPIFY_API_VERSION") or "2024-10",
            history_months=number("SHOPIFY_HISTORY_MONTHS", 12, int),
            net_sales_mode=values.get("SHOPIFY_NET_SALES_MODE") or "subtotal_ex_tax_ship",
            target_growth_pct=number("SHOPIFY_TARGET_GROWTH_PCT", 0.0),
            cache_ttl_seconds=number("CACHE_TTL_SECONDS", 60.0),
            stale_cache_max_age_seconds=number("STALE_CACHE_MAX_AGE_SECONDS", 3600.0),
            http_timeout=number("HTTP_TIMEOUT", 15.0),
            http_retries=number("HTTP_RETRIES", 2, int),
        )

    @property
    def target_config(self) -> TargetConfig:
        """Engine configuration derived from these settings."""
        return TargetConfig(
            timezone=self.timezone,
            growth_pct=self.target_growth_pct,
            net_sales_mode=self.net_sales_mode,
            history_months=self.history_months,
        )
