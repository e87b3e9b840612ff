"""Base interface for sales sources.

Every place sales are recorded (the e-commerce platform, the manual ledger,
a CSV export) is read through the same interface so the service can merge
them without knowing where they come from.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, List, Optional


@dataclass
class SaleItem:
    """One sold item shown in a day's drill-down.

    Attributes:
        id: Unique id, prefixed with the kind (e.g. "shopify:<order>:<line>").
        kind: "shopify" or "manual".
        sold_at: ISO timestamp of the sale; items are listed newest first.
        description: Product name or a short label.
        quantity: Units sold.
        amount: Amount, when known per item (None for platform line items).
        source: Where the sale was recorded.
        note: Optional free text.
        order_name: Platform order name (e.g. "#1001"), if any.
    """

    id: str
    kind: str
    sold_at: str
    description: str
    quantity: float = 1
    amount: Optional[float] = None
    source: Optional[str] = None
    note: Optional[str] = None
    order_name: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class SalesSource(ABC):
    """Abstract base class for sales sources."""

    name: str = "source"

    @abstractmethod
    def daily_sales_map(self, start: date, end_exclusive: date, timezone: str) -> dict[str, float]:
        """Return total sales per local calendar day.

        Args:
            start: First day to include.
            end_exclusive: First day not to include.
            timezone: IANA zone that defines day boundaries.

        Returns:
            Day key (YYYY-MM-DD) -> amount. Days without sales may be absent.

        Raises:
            ExtractionError: If the source cannot be read.
        """
        pass

    def daily_items(self, day: date, timezone: str) -> List[SaleItem]:
        """Individual items sold on ``day``.

        Sources that only know daily totals return an empty list.
        """
        return []
