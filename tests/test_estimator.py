"""Tests for the baseline target estimator."""

from datetime import date

import pytest

from retail_targets.config import TargetConfig
from retail_targets.targets.estimator import compute_target_for_date, is_closed_day
from retail_targets.targets.history import HistoricalRow


def test_empty_history_returns_zero() -> None:
    """No history means no target."""
    assert compute_target_for_date(date(2026, 2, 9), []) == 0


def test_positive_target_with_history() -> None:
    """Unmatched weekday/month history falls back to the overall average."""
    history = [
        HistoricalRow(date(2025, 2, 9), 500),  # Sunday
        HistoricalRow(date(2025, 1, 9), 300),  # Thursday
        HistoricalRow(date(2025, 2, 2), 200),  # Sunday
    ]
    result = compute_target_for_date(date(2026, 2, 9), history)  # Monday

    assert result > 0
    assert result == pytest.approx(1000 / 3)


def test_sunday_is_always_zero() -> None:
    """Sundays are closed whatever the history says."""
    history = [
        HistoricalRow(date(2025, 2, 2), 250),  # Sunday
        HistoricalRow(date(2025, 2, 3), 250),  # Monday
    ]
    assert compute_target_for_date(date(2026, 2, 8), history) == 0
    assert compute_target_for_date(date(2026, 2, 15), history) == 0


def test_prefers_previous_year_same_month_weekday() -> None:
    """Previous-year February Mondays win; the December row must not leak in."""
    history = [
        HistoricalRow(date(2025, 2, 3), 40.5),  # Feb Monday last year
        HistoricalRow(date(2025, 2, 10), 39.5),  # Feb Monday last year
        HistoricalRow(date(2024, 12, 2), 120),  # different month
    ]
    assert compute_target_for_date(date(2026, 2, 9), history) == 40


def test_falls_back_to_same_month_any_year() -> None:
    """Without last year's February, older Februaries on the same weekday are used."""
    history = [
        HistoricalRow(date(2024, 2, 5), 70),  # Feb Monday two years back
        HistoricalRow(date(2025, 3, 3), 200),  # March Monday
    ]
    assert compute_target_for_date(date(2026, 2, 9), history) == 70


def test_falls_back_to_any_month_same_weekday() -> None:
    """Same-weekday history from other months beats the overall average."""
    history = [
        HistoricalRow(date(2025, 3, 3), 80),  # Monday
        HistoricalRow(date(2025, 3, 4), 20),  # Tuesday
    ]
    assert compute_target_for_date(date(2026, 2, 9), history) == 80


def test_falls_back_to_overall_average() -> None:
    """With no weekday match at all the overall mean is used."""
    history = [
        HistoricalRow(date(2025, 3, 4), 20),  # Tuesday
        HistoricalRow(date(2025, 3, 5), 40),  # Wednesday
    ]
    assert compute_target_for_date(date(2026, 2, 9), history) == 30


def test_zero_weekday_average_does_not_win() -> None:
    """A weekday tier averaging 0 counts as no signal."""
    history = [
        HistoricalRow(date(2025, 2, 3), 0),  # Feb Monday last year, nothing sold
        HistoricalRow(date(2025, 3, 4), 60),  # Tuesday
    ]
    assert compute_target_for_date(date(2026, 2, 9), history) == 30


def test_single_row() -> None:
    history = [HistoricalRow(date(2025, 6, 12), 55.5)]
    assert compute_target_for_date(date(2026, 2, 9), history) == 55.5


def test_growth_multiplier() -> None:
    """Positive growth scales the base up."""
    history = [HistoricalRow(date(2025, 2, 3), 100)]
    config = TargetConfig(growth_pct=10)
    assert compute_target_for_date(date(2026, 2, 9), history, config) == pytest.approx(110)


def test_negative_growth_clamped_at_zero() -> None:
    """Shrinking past zero yields 0, never a negative target."""
    history = [HistoricalRow(date(2025, 2, 3), 100)]
    assert compute_target_for_date(date(2026, 2, 9), history, TargetConfig(growth_pct=-50)) == 50
    assert compute_target_for_date(date(2026, 2, 9), history, TargetConfig(growth_pct=-150)) == 0


def test_configurable_closed_weekday() -> None:
    """A shop closed on Mondays gets Monday zeros and trades on Sundays."""
    config = TargetConfig(closed_weekday=1)
    history = [HistoricalRow(date(2025, 2, 2), 90)]

    assert is_closed_day(date(2026, 2, 9), config)
    assert compute_target_for_date(date(2026, 2, 9), history, config) == 0
    assert compute_target_for_date(date(2026, 2, 8), history, config) == 90


def test_nan_amounts_do_not_produce_nan() -> None:
    """NaN averages are skipped and never leak into the result."""
    history = [HistoricalRow(date(2025, 2, 3), float("nan"))]
    assert compute_target_for_date(date(2026, 2, 9), history) == 0
