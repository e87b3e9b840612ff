"""Tests for the Shopify and CSV sales sources.

The Shopify client is exercised against a fake session; no network access.
"""

from datetime import date
from pathlib import Path
from typing import Any

import pytest

from retail_targets.exceptions import ConfigError, ExtractionError
from retail_targets.sources import CsvSalesSource, ShopifyClient, ShopifySalesSource
from retail_targets.sources.shopify import order_amount


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        return self._payload


class FakeSession:
    """Returns queued responses and records every POST."""

    def __init__(self, responses: list[FakeResponse]) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        return self.responses.pop(0)


def _order(created_at: str, total: float, subtotal: float = 0, tax: float = 0) -> dict:
    def money(amount: float) -> dict:
        return {"shopMoney": {"amount": str(amount), "currencyCode": "GBP"}}

    return {
        "id": f"gid://shopify/Order/{created_at}",
        "createdAt": created_at,
        "currentTotalPriceSet": money(total),
        "currentSubtotalPriceSet": money(subtotal),
        "currentTotalTaxSet": money(tax),
    }


def _page(orders: list[dict], next_cursor: str | None = None) -> FakeResponse:
    return FakeResponse(
        payload={
            "data": {
                "orders": {
                    "pageInfo": {"hasNextPage": next_cursor is not None, "endCursor": next_cursor},
                    "edges": [{"node": order} for order in orders],
                }
            }
        }
    )


def test_order_amount_modes() -> None:
    order = _order("2026-02-10T10:00:00Z", total=120, subtotal=90, tax=20)
    assert order_amount(order, "total") == 120
    assert order_amount(order, "subtotal_ex_tax_ship") == 90

    no_subtotal = _order("2026-02-10T10:00:00Z", total=120, subtotal=0, tax=20)
    assert order_amount(no_subtotal, "subtotal_ex_tax_ship") == 100

    refunded = _order("2026-02-10T10:00:00Z", total=5, subtotal=0, tax=20)
    assert order_amount(refunded, "subtotal_ex_tax_ship") == 0


def test_fetch_orders_follows_pagination() -> None:
    session = FakeSession(
        [
            _page([_order("2026-02-10T10:00:00Z", 10)], next_cursor="abc"),
            _page([_order("2026-02-11T10:00:00Z", 20)]),
        ]
    )
    client = ShopifyClient("shop.myshopify.com", "token", session=session)

    orders = client.fetch_orders("2026-02-01T00:00:00+00:00", "2026-03-01T00:00:00+00:00")

    assert len(orders) == 2
    assert session.calls[0]["url"] == "https://shop.myshopify.com/admin/api/2024-10/graphql.json"
    assert session.calls[0]["headers"]["X-Shopify-Access-Token"] == "token"
    assert session.calls[0]["json"]["variables"]["after"] is None
    assert session.calls[1]["json"]["variables"]["after"] == "abc"
    assert "status:any" in session.calls[0]["json"]["variables"]["query"]


def test_daily_sales_map_buckets_by_local_day() -> None:
    """23:30 UTC is already the next day in Berlin."""
    session = FakeSession(
        [
            _page(
                [
                    _order("2026-02-10T10:00:00Z", total=50, subtotal=40),
                    _order("2026-02-10T23:30:00Z", total=30, subtotal=25),
                    _order("2026-02-11T08:00:00Z", total=12.5, subtotal=10),
                ]
            )
        ]
    )
    source = ShopifySalesSource(ShopifyClient("shop", "token", session=session), "total")

    sales = source.daily_sales_map(date(2026, 2, 10), date(2026, 2, 12), "Europe/Berlin")

    assert sales == {"2026-02-10": 50, "2026-02-11": 42.5}
    query = session.calls[0]["json"]["variables"]["query"]
    assert "created_at:>=2026-02-10T00:00:00+01:00" in query
    assert "created_at:<2026-02-12T00:00:00+01:00" in query


def test_http_error_raises_extraction_error() -> None:
    client = ShopifyClient("shop", "token", session=FakeSession([FakeResponse(503, text="down")]))
    with pytest.raises(ExtractionError, match="Shopify API error 503: down"):
        client.graphql("{ shop { name } }")


def test_graphql_errors_raise_extraction_error() -> None:
    response = FakeResponse(payload={"errors": [{"message": "Throttled"}]})
    client = ShopifyClient("shop", "token", session=FakeSession([response]))
    with pytest.raises(ExtractionError, match="Throttled"):
        client.graphql("{ shop { name } }")


def test_missing_token_raises_before_request() -> None:
    session = FakeSession([])
    client = ShopifyClient("shop", "", session=session)
    with pytest.raises(ExtractionError, match="not connected"):
        client.graphql("{ shop { name } }")
    assert session.calls == []


def test_invalid_net_sales_mode() -> None:
    with pytest.raises(ConfigError):
        ShopifySalesSource(ShopifyClient("shop", "token", session=FakeSession([])), "gross")


def test_csv_source(tmp_path: Path) -> None:
    csv_path = tmp_path / "sales.csv"
    csv_path.write_text(
        "date,amount\n"
        "2026-01-31,9\n"
        "2026-02-01,10.5\n"
        "2026-02-01,4.5\n"
        "2026-02-28,3\n"
        "2026-03-01,100\n"
    )
    source = CsvSalesSource(csv_path)

    sales = source.daily_sales_map(date(2026, 2, 1), date(2026, 3, 1), "Europe/London")

    assert sales == {"2026-02-01": 15, "2026-02-28": 3}


def test_csv_source_errors(tmp_path: Path) -> None:
    with pytest.raises(ExtractionError, match="not found"):
        CsvSalesSource(tmp_path / "missing.csv").daily_sales_map(
            date(2026, 2, 1), date(2026, 3, 1), "Europe/London"
        )

    bad = tmp_path / "bad.csv"
    bad.write_text("day,total\n2026-02-01,10\n")
    with pytest.raises(ExtractionError, match="Missing required columns"):
        CsvSalesSource(bad).daily_sales_map(date(2026, 2, 1), date(2026, 3, 1), "Europe/London")


def test_csv_source_unreadable_file(tmp_path: Path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_text("")
    with pytest.raises(ExtractionError, match="Could not read sales CSV"):
        CsvSalesSource(empty).daily_sales_map(date(2026, 2, 1), date(2026, 3, 1), "Europe/London")

    broken = tmp_path / "broken.csv"
    broken.write_text('date,amount\n2026-02-01,10\n"2026-02-02,5\n')
    with pytest.raises(ExtractionError, match="Could not read sales CSV"):
        CsvSalesSource(broken).daily_sales_map(date(2026, 2, 1), date(2026, 3, 1), "Europe/London")


def test_daily_items_lists_line_items() -> None:
    """Line items come back newest first, without amounts."""
    morning = _order("2026-02-10T09:00:00Z", 20)
    morning["name"] = "#1001"
    morning["lineItems"] = {"edges": [{"node": {"id": "L1", "name": "Denim jacket", "quantity": 1}}]}
    evening = _order("2026-02-10T17:00:00Z", 35)
    evening["name"] = "#1002"
    evening["lineItems"] = {
        "edges": [
            {"node": {"id": "L2", "name": "Scarf", "quantity": 2}},
            {"node": {"id": "L3", "name": None, "quantity": None}},
            {"node": None},
        ]
    }
    session = FakeSession([_page([morning, evening])])
    source = ShopifySalesSource(ShopifyClient("shop", "token", session=session), "total")

    items = source.daily_items(date(2026, 2, 10), "Europe/London")

    assert [item.description for item in items] == ["Scarf", "Item", "Denim jacket"]
    assert items[0].id == "shopify:gid://shopify/Order/2026-02-10T17:00:00Z:L2"
    assert items[0].quantity == 2
    assert items[1].quantity == 1
    assert items[2].order_name == "#1001"
    assert all(item.amount is None and item.kind == "shopify" for item in items)

    request = session.calls[0]["json"]
    assert "lineItems" in request["query"]
    assert "created_at:>=2026-02-10T00:00:00+00:00" in request["variables"]["query"]
    assert "created_at:<2026-02-11T00:00:00+00:00" in request["variables"]["query"]
