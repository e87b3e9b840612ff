"""CSV export sales source.

Reads a sales export (one row per sale or per day) with pandas. Useful for
back-filling history from a till or a previous platform.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pandas as pd

from retail_targets.exceptions import ExtractionError
from retail_targets.sources.base import SalesSource
from retail_targets.targets.calendar import date_key
from retail_targets.targets.history import sales_map_from_frame

logger = logging.getLogger(__name__)


class CsvSalesSource(SalesSource):
    """Daily sales summed from a CSV file.

    Args:
        path: CSV file path.
        date_column: Column with the sale date (YYYY-MM-DD or a timestamp).
        amount_column: Column with the sale amount.
    """

    name = "csv"

    def __init__(self, path: str | Path, date_column: str = "date", amount_column: str = "amount") -> None:
        self.path = Path(path)
        self.date_column = date_column
        self.amount_column = amount_column

    def daily_sales_map(self, start: date, end_exclusive: date, timezone: str) -> dict[str, float]:
        if not self.path.exists():
            raise ExtractionError(f"Sales CSV not found at {self.path}")
        try:
            df = pd.read_csv(self.path)
            sales = sales_map_from_frame(df, self.date_column, self.amount_column)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ExtractionError(f"Could not read sales CSV {self.path}: {e}") from e
        except KeyError as e:
            raise ExtractionError(f"{self.path}: {e}") from e

        first, last = date_key(start), date_key(end_exclusive)
        in_range = {key: amount for key, amount in sales.items() if first <= key < last}
        logger.info("Loaded %d days of sales from %s", len(in_range), self.path)
        return in_range
