"""Tests for TargetConfig and Settings."""

from pathlib import Path

import pytest

from retail_targets.config import Settings, TargetConfig
from retail_targets.exceptions import ConfigError


def test_target_config_defaults() -> None:
    config = TargetConfig()
    assert config.timezone == "Europe/London"
    assert config.growth_pct == 0
    assert config.closed_weekday == 7
    assert str(config.tz) == "Europe/London"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"timezone": "Mars/Olympus_Mons"},
        {"closed_weekday": 0},
        {"closed_weekday": 8},
        {"net_sales_mode": "gross"},
        {"history_months": -1},
    ],
)
def test_target_config_validation(kwargs: dict) -> None:
    with pytest.raises(ConfigError):
        TargetConfig(**kwargs)


def test_settings_from_env() -> None:
    environ = {
        "TZ": "America/New_York",
        "SHOPIFY_STORE_DOMAIN": "https://my-shop.myshopify.com//",
        "SHOPIFY_ADMIN_TOKEN": "shpat_x",
        "SHOPIFY_HISTORY_MONTHS": "6",
        "SHOPIFY_TARGET_GROWTH_PCT": "7.5",
        "SHOPIFY_NET_SALES_MODE": "total",
        "MANUAL_ENTRIES_FILE": "/data/entries.json",
        "CACHE_TTL_SECONDS": "30",
    }

    settings = Settings.from_env(environ=environ)

    assert settings.timezone == "America/New_York"
    assert settings.shopify_domain == "my-shop.myshopify.com"
    assert settings.shopify_token == "shpat_x"
    assert settings.history_months == 6
    assert settings.target_growth_pct == 7.5
    assert settings.manual_entries_file == Path("/data/entries.json")
    assert settings.month_goals_file == Path(".shopify-month-goals.json")
    assert settings.cache_ttl_seconds == 30
    assert settings.stale_cache_max_age_seconds == 3600

    config = settings.target_config
    assert config == TargetConfig(
        timezone="America/New_York", growth_pct=7.5, net_sales_mode="total", history_months=6
    )


def test_settings_defaults_from_empty_env() -> None:
    settings = Settings.from_env(environ={})
    assert settings == Settings()


def test_settings_bad_number() -> None:
    with pytest.raises(ConfigError, match="SHOPIFY_HISTORY_MONTHS"):
        Settings.from_env(environ={"SHOPIFY_HISTORY_MONTHS": "twelve"})


def test_env_file_is_overridden_by_environment(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("SHOPIFY_TARGET_GROWTH_PCT=5\nCACHE_TTL_SECONDS=10\n")

    settings = Settings.from_env(env_file, environ={"CACHE_TTL_SECONDS": "99"})

    assert settings.target_growth_pct == 5
    assert settings.cache_ttl_seconds == 99
