"""Calendar and money helpers shared by the target engine.

Day keys are ``YYYY-MM-DD`` strings, month keys ``YYYY-MM``. Weekdays follow
the ISO convention (1 = Monday ... 7 = Sunday), i.e. ``date.isoweekday()``.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo

from retail_targets.exceptions import ValidationError

SUNDAY = 7

_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$")
_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def round2(value: float) -> float:
    """Round a monetary value to cents, halves going up.

    ``round()`` rounds halves to even, which would drift from the figures the
    dashboard has always shown. Cents are rounded half up, comparing the
    fractional part exactly: adding 0.5 before flooring can itself round up
    (0.49999999999999994 + 0.5 == 1.0 in floating point).

    Examples:
        >>> round2(0.125)
        0.13
        >>> round2(-0.125)
        -0.12
        >>> round2(0.004999999999999999)
        0.0
    """
    cents = value * 100
    whole = math.floor(cents)
    if cents - whole >= 0.5:
        whole += 1
    return whole / 100


def date_key(d: date) -> str:
    """Format a date as a ``YYYY-MM-DD`` day key."""
    return d.strftime("%Y-%m-%d")


def parse_date_key(key: str) -> date:
    """Parse a ``YYYY-MM-DD`` day key.

    Raises:
        ValidationError: If the key is not a valid calendar date.
    """
    if not _DATE_KEY_RE.match(str(key)):
        raise ValidationError("Invalid date. Expected YYYY-MM-DD.")
    try:
        return datetime.strptime(str(key), "%Y-%m-%d").date()
    except ValueError as e:
        raise ValidationError("Invalid date. Expected YYYY-MM-DD.") from e


def month_key(d: date) -> str:
    """Format the month of a date as ``YYYY-MM``."""
    return d.strftime("%Y-%m")


def is_valid_month_key(key: str) -> bool:
    return bool(_MONTH_KEY_RE.match(str(key)))


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length.

    Examples:
        >>> add_months(date(2026, 3, 31), -1)
        datetime.date(2026, 2, 28)
    """
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_bounds(d: date) -> tuple[date, date]:
    """Return (first day of d's month, first day of the following month)."""
    start = d.replace(day=1)
    return start, add_months(start, 1)


def iter_days(start: date, end_exclusive: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end_exclusive)``."""
    cursor = start
    while cursor < end_exclusive:
        yield cursor
        cursor += timedelta(days=1)


def local_today(now: date | datetime, tz: ZoneInfo) -> date:
    """Calendar day of ``now`` in ``tz``.

    Plain dates are returned as-is; naive datetimes are taken to be local
    already.
    """
    if isinstance(now, datetime):
        if now.tzinfo is not None:
            now = now.astimezone(tz)
        return now.date()
    return now
