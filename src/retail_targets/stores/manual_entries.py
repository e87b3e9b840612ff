"""File-backed ledger of manually logged sales.

Staff record sales that never pass through the e-commerce platform (market
stalls, cash, second-hand marketplaces). Entries are stored newest first in::

    {"entries": [{"id": ..., "date": "YYYY-MM-DD", "amount": 12.5, ...}], "updated_at": ...}

The store doubles as a SalesSource so its totals merge with platform sales.
"""

from __future__ import annotations

import json
import logging
import math
import uuid
from dataclasses import asdict, dataclass
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo

from retail_targets.config import DEFAULT_TIMEZONE
from retail_targets.exceptions import EntryNotFoundError, ValidationError
from retail_targets.sources.base import SaleItem, SalesSource
from retail_targets.targets.calendar import date_key, parse_date_key, round2

logger = logging.getLogger(__name__)

VALID_SOURCES = ("vinted", "website", "cash", "other")

DEFAULT_LIMIT = 200
MAX_LIMIT = 1000
DAY_ITEMS_LIMIT = 500


@dataclass
class ManualEntry:
    """A manually logged sale.

    Attributes:
        id: uuid4 string.
        date: Day key the sale counts towards.
        amount: Amount, rounded to cents.
        source: One of VALID_SOURCES.
        description: Free text; required when source is "other".
        note: Optional free text.
        created_at: ISO timestamp (UTC) of creation.
    """

    id: str
    date: str
    amount: float
    source: str
    description: Optional[str]
    note: Optional[str]
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _date_or_today(value: Optional[str], tz_name: str) -> str:
    if not value:
        return date_key(datetime.now(ZoneInfo(tz_name)))
    return date_key(parse_date_key(value))


def _parse_entry(raw: Any) -> Optional[ManualEntry]:
    """ManualEntry from a stored record, or None if the record is unusable.

    Unknown keys are ignored; a record needs an id, a valid day key and a
    numeric amount.
    """
    if not isinstance(raw, dict) or not raw.get("id"):
        return None
    try:
        day = date_key(parse_date_key(raw.get("date")))
        amount = float(raw.get("amount") or 0)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(amount):
        return None
    return ManualEntry(
        id=str(raw["id"]),
        date=day,
        amount=amount,
        source=str(raw.get("source") or "other"),
        description=raw.get("description"),
        note=raw.get("note"),
        created_at=str(raw.get("created_at") or ""),
    )


class ManualEntryStore(SalesSource):
    """Create, list and delete manual sales entries.

    Args:
        path: JSON file location. Created on first write.
        timezone: IANA zone used to resolve "today" for undated entries.
    """

    name = "manual"

    def __init__(self, path: str | Path, timezone: str = DEFAULT_TIMEZONE) -> None:
        self.path = Path(path)
        self.timezone = timezone

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            parsed = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Error reading manual entries %s: %s", self.path, e)
            return []
        entries = parsed.get("entries") if isinstance(parsed, dict) else None
        return list(entries) if isinstance(entries, list) else []

    def _write(self, entries: list[dict[str, Any]]) -> None:
        payload = {"entries": entries, "updated_at": datetime.now(timezone.utc).isoformat()}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.debug("Wrote %d manual entries: %s", len(entries), self.path)

    def create_entry(
        self,
        amount: float,
        source: str,
        sale_date: Optional[str] = None,
        description: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ManualEntry:
        """Validate and store a new entry.

        Args:
            amount: Positive amount.
            source: vinted, website, cash or other (case-insensitive).
            sale_date: Day key; defaults to today in the store's timezone.
            description: Required when source is "other".
            note: Optional note.

        Returns:
            The stored entry.

        Raises:
            ValidationError: On any invalid field.
        """
        try:
            value = float(amount)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value) or value <= 0:
            raise ValidationError("Amount must be a positive number.")

        source = str(source or "").lower()
        if source not in VALID_SOURCES:
            raise ValidationError(f"Source must be one of: {', '.join(VALID_SOURCES)}.")

        description = (description or "").strip()
        note = (note or "").strip()
        if source == "other" and not description:
            raise ValidationError("Description is required when source is other.")

        entry = ManualEntry(
            id=str(uuid.uuid4()),
            date=_date_or_today(sale_date, self.timezone),
            amount=round2(value),
            source=source,
            description=description or None,
            note=note or None,
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        entries = self._read()
        entries.append(entry.to_dict())
        entries.sort(key=lambda e: str(e.get("created_at", "")) if isinstance(e, dict) else "", reverse=True)
        self._write(entries)
        logger.info("Created manual entry %s: %.2f (%s) on %s", entry.id, entry.amount, source, entry.date)
        return entry

    def list_entries(
        self,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = DEFAULT_LIMIT,
    ) -> list[ManualEntry]:
        """Entries with ``date_from <= date <= date_to``, newest first.

        Args:
            date_from: Inclusive lower bound (day key), or None.
            date_to: Inclusive upper bound (day key), or None.
            limit: Maximum entries returned, clamped to 1..1000.

        Raises:
            ValidationError: If a bound is not a valid day key.
        """
        from_key = date_key(parse_date_key(date_from)) if date_from else None
        to_key = date_key(parse_date_key(date_to)) if date_to else None
        limit = max(1, min(int(limit or DEFAULT_LIMIT), MAX_LIMIT))
        return self._select(from_key, to_key)[:limit]

    def _select(self, from_key: Optional[str], to_key: Optional[str]) -> list[ManualEntry]:
        selected = []
        for raw in self._read():
            entry = _parse_entry(raw)
            if entry is None:
                logger.warning("Skipping unreadable manual entry in %s: %r", self.path, raw)
                continue
            if (from_key is None or entry.date >= from_key) and (to_key is None or entry.date <= to_key):
                selected.append(entry)
        return selected

    def delete_entry(self, entry_id: str) -> Optional[ManualEntry]:
        """Remove an entry.

        Returns:
            The removed entry, or None if the stored record was unreadable
            (it is removed all the same).

        Raises:
            ValidationError: If entry_id is empty.
            EntryNotFoundError: If no entry has that id.
        """
        entry_id = str(entry_id or "").strip()
        if not entry_id:
            raise ValidationError("Entry id is required.")

        entries = self._read()
        matches = [e for e in entries if isinstance(e, dict) and e.get("id") == entry_id]
        if not matches:
            raise EntryNotFoundError("Manual entry not found.")

        self._write([e for e in entries if not (isinstance(e, dict) and e.get("id") == entry_id)])
        logger.info("Deleted manual entry %s", entry_id)
        return _parse_entry(matches[0])

    def daily_sales_map(self, start: date, end_exclusive: date, timezone: str) -> dict[str, float]:
        """Sum of entry amounts per day in ``[start, end_exclusive)``."""
        last = end_exclusive - timedelta(days=1)
        sales: dict[str, float] = {}
        for entry in self._select(date_key(start), date_key(last)):
            sales[entry.date] = round2(sales.get(entry.date, 0.0) + float(entry.amount or 0))
        return sales

    def daily_items(self, day: date, timezone: str) -> list[SaleItem]:
        """Entries dated ``day`` as drill-down items, newest first."""
        key = date_key(day)
        return [
            SaleItem(
                id=f"manual:{entry.id}",
                kind="manual",
                sold_at=entry.created_at,
                description=entry.description or f"{entry.source} sale",
                quantity=1,
                amount=entry.amount,
                source=entry.source,
                note=entry.note,
            )
            for entry in self.list_entries(key, key, limit=DAY_ITEMS_LIMIT)
        ]
