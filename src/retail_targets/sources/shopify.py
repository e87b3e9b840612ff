"""Shopify Admin GraphQL sales source.

Orders are fetched page by page for a date range and bucketed into local
calendar days. Amounts depend on the net sales mode:

- ``total``: the order's current total price;
- ``subtotal_ex_tax_ship``: the current subtotal, or total minus tax when the
  subtotal is missing or zero.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any
from zoneinfo import ZoneInfo

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from retail_targets.config import NET_SALES_MODES, Settings
from retail_targets.exceptions import ConfigError, ExtractionError
from retail_targets.sources.base import SaleItem, SalesSource
from retail_targets.targets.calendar import date_key

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

ORDERS_QUERY = """
query OrdersInRange($first: Int!, $after: String, $query: String!) {
  orders(first: $first, after: $after, query: $query, sortKey: CREATED_AT) {
    pageInfo { hasNextPage endCursor }
    edges {
      node {
        id
        createdAt
        currentTotalPriceSet { shopMoney { amount currencyCode } }
        currentSubtotalPriceSet { shopMoney { amount currencyCode } }
        currentTotalTaxSet { shopMoney { amount currencyCode } }
      }
    }
  }
}
"""

ORDER_ITEMS_QUERY = """
query OrdersInRangeWithItems($first: Int!, $after: String, $query: String!) {
  orders(first: $first, after: $after, query: $query, sortKey: CREATED_AT) {
    pageInfo { hasNextPage endCursor }
    edges {
      node {
        id
        name
        createdAt
        lineItems(first: 100) {
          edges { node { id name quantity } }
        }
      }
    }
  }
}
"""


def make_session(timeout: float = 15.0, retries: int = 2) -> requests.Session:
    """Create a requests Session with retry logic and default timeout.

    Retries connection errors and 429/5xx responses with exponential backoff.

    Args:
        timeout: Default timeout in seconds for all requests.
        retries: Number of retry attempts.

    Returns:
        Configured requests.Session object.
    """
    s = requests.Session()
    retry = Retry(
        total=retries,
        connect=retries,
        read=retries,
        status=retries,
        backoff_factor=0.4,  # 0.4, 0.8, 1.6, ...
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "POST"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    orig_request = s.request

    def timed_request(method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return orig_request(method, url, **kwargs)

    s.request = timed_request  # type: ignore[method-assign,assignment]
    return s


def _money(node: dict[str, Any], field: str) -> float:
    try:
        return float(((node.get(field) or {}).get("shopMoney") or {}).get("amount") or 0)
    except (TypeError, ValueError):
        return 0.0


def order_amount(order: dict[str, Any], net_sales_mode: str) -> float:
    """Value of one order under the given net sales mode."""
    total = _money(order, "currentTotalPriceSet")
    if net_sales_mode != "subtotal_ex_tax_ship":
        return total
    subtotal = _money(order, "currentSubtotalPriceSet")
    tax = _money(order, "currentTotalTaxSet")
    return subtotal if subtotal > 0 else max(total - tax, 0.0)


class ShopifyClient:
    """Thin GraphQL client for the Shopify Admin API."""

    def __init__(
        self,
        domain: str,
        access_token: str,
        api_version: str = "2024-10",
        session: requests.Session | None = None,
    ) -> None:
        self.domain = domain
        self.access_token = access_token
        self.url = f"https://{domain}/admin/api/{api_version}/graphql.json"
        self.session = session or make_session()

    @classmethod
    def from_settings(cls, settings: Settings) -> ShopifyClient:
        return cls(
            domain=settings.shopify_domain,
            access_token=settings.shopify_token,
            api_version=settings.shopify_api_version,
            session=make_session(settings.http_timeout, settings.http_retries),
        )

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` payload.

        Raises:
            ExtractionError: If no token is configured, the HTTP status is not
                2xx, or the response carries GraphQL errors.
        """
        if not self.access_token:
            raise ExtractionError("Shopify is not connected. Set SHOPIFY_ADMIN_TOKEN.")

        try:
            resp = self.session.post(
                self.url,
                json={"query": query, "variables": variables or {}},
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                },
            )
        except requests.RequestException as e:
            raise ExtractionError(f"Shopify request failed: {e}") from e

        if not (200 <= resp.status_code < 300):
            raise ExtractionError(f"Shopify API error {resp.status_code}: {resp.text[:400]}")

        payload = resp.json()
        if payload.get("errors"):
            raise ExtractionError(f"Shopify GraphQL errors: {payload['errors']}")
        return payload.get("data") or {}

    def fetch_orders(
        self, start_iso: str, end_iso: str, query: str = ORDERS_QUERY
    ) -> list[dict[str, Any]]:
        """All orders created in ``[start_iso, end_iso)``, following pagination.

        ``query`` selects the order fields; ORDER_ITEMS_QUERY adds line items.
        """
        search = f"created_at:>={start_iso} created_at:<{end_iso} status:any"
        orders: list[dict[str, Any]] = []
        after = None
        while True:
            data = self.graphql(query, {"first": PAGE_SIZE, "after": after, "query": search})
            connection = data["orders"]
            orders.extend(edge["node"] for edge in connection["edges"])
            page_info = connection["pageInfo"]
            if not page_info.get("hasNextPage"):
                break
            after = page_info["endCursor"]
            logger.debug("Fetched %d orders so far, next cursor %s", len(orders), after)
        return orders


class ShopifySalesSource(SalesSource):
    """Daily sales from Shopify orders."""

    name = "shopify"

    def __init__(self, client: ShopifyClient, net_sales_mode: str = "subtotal_ex_tax_ship") -> None:
        if net_sales_mode not in NET_SALES_MODES:
            raise ConfigError(f"Invalid net_sales_mode {net_sales_mode!r}")
        self.client = client
        self.net_sales_mode = net_sales_mode

    def daily_sales_map(self, start: date, end_exclusive: date, timezone: str) -> dict[str, float]:
        tz = ZoneInfo(timezone)
        start_iso = datetime.combine(start, time.min, tzinfo=tz).isoformat()
        end_iso = datetime.combine(end_exclusive, time.min, tzinfo=tz).isoformat()
        orders = self.client.fetch_orders(start_iso, end_iso)
        logger.info("Loaded %d Shopify orders for %s to %s", len(orders), start, end_exclusive)

        sales: dict[str, float] = {}
        for order in orders:
            created = datetime.fromisoformat(order["createdAt"].replace("Z", "+00:00"))
            key = date_key(created.astimezone(tz))
            sales[key] = sales.get(key, 0.0) + order_amount(order, self.net_sales_mode)
        return sales

    def daily_items(self, day: date, timezone: str) -> list[SaleItem]:
        """Line items of every order created on ``day``, newest first.

        Line items carry no amount; the order totals already feed the daily map.
        """
        tz = ZoneInfo(timezone)
        start = datetime.combine(day, time.min, tzinfo=tz)
        end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
        orders = self.client.fetch_orders(start.isoformat(), end.isoformat(), ORDER_ITEMS_QUERY)

        items: list[SaleItem] = []
        for order in orders:
            for edge in (order.get("lineItems") or {}).get("edges") or []:
                line = (edge or {}).get("node")
                if not line:
                    continue
                items.append(
                    SaleItem(
                        id=f"shopify:{order['id']}:{line.get('id')}",
                        kind="shopify",
                        sold_at=order["createdAt"],
                        description=line.get("name") or "Item",
                        quantity=float(line.get("quantity") or 1),
                        source="shopify",
                        order_name=order.get("name"),
                    )
                )
        items.sort(key=lambda item: item.sold_at, reverse=True)
        logger.info("Loaded %d Shopify line items for %s", len(items), day)
        return items
