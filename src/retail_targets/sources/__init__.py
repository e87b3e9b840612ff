"""Sales sources: where daily sales totals come from."""

from retail_targets.sources.base import SaleItem, SalesSource
from retail_targets.sources.csv_file import CsvSalesSource
from retail_targets.sources.shopify import ShopifyClient, ShopifySalesSource

__all__ = ["CsvSalesSource", "SaleItem", "SalesSource", "ShopifyClient", "ShopifySalesSource"]
