"""File-backed store for month goals.

Goals are kept in a small JSON document::

    {"goals": {"2026-02": 12000}, "updated_at": "2026-02-10T12:00:00+00:00"}

A missing or unreadable file reads as "no goals".
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from retail_targets.exceptions import ValidationError
from retail_targets.targets.calendar import is_valid_month_key, month_key

logger = logging.getLogger(__name__)


def _require_month_key(month: str) -> None:
    if not is_valid_month_key(month):
        raise ValidationError("Invalid month format. Expected YYYY-MM.")


def _positive_number(value: object) -> Optional[float]:
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def current_month_key(tz_name: str, now: Optional[datetime] = None) -> str:
    """Month key (YYYY-MM) of ``now`` (default: the current instant) in ``tz_name``."""
    now = now or datetime.now(timezone.utc)
    return month_key(now.astimezone(ZoneInfo(tz_name)))


class MonthGoalStore:
    """Read and write per-month sales goals.

    Args:
        path: JSON file location. Created on first write.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error reading month goals %s: %s", self.path, e)
            return {}
        goals = parsed.get("goals") if isinstance(parsed, dict) else None
        return dict(goals) if isinstance(goals, dict) else {}

    def _write(self, goals: dict[str, object]) -> None:
        payload = {"goals": goals, "updated_at": datetime.now(timezone.utc).isoformat()}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Wrote month goals: %s", self.path)

    def get_month_goal(self, month: str) -> Optional[float]:
        """Goal for ``month``, or None when unset or not a positive number.

        Raises:
            ValidationError: If month is not YYYY-MM.
        """
        _require_month_key(month)
        return _positive_number(self._read().get(month))

    def set_month_goal(self, month: str, goal: Optional[float]) -> Optional[float]:
        """Set (or with ``None``, clear) the goal for ``month``.

        Returns:
            The goal as stored, read back.

        Raises:
            ValidationError: If month is not YYYY-MM or goal is not a positive number.
        """
        _require_month_key(month)
        goals = self._read()
        if goal is None:
            goals.pop(month, None)
        else:
            amount = _positive_number(goal)
            if amount is None:
                raise ValidationError("Goal must be a positive number.")
            goals[month] = amount

        self._write(goals)
        logger.info("Month goal for %s set to %s", month, goal)
        return self.get_month_goal(month)
