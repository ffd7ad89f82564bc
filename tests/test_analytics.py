"""Tests for sales analytics aggregation."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from httpx import AsyncClient

from src.services.business_rules import InvalidInputError
from src.services.analytics_service import (
    AnalyticsPeriod,
    UNKNOWN_PRODUCT_NAME,
    build_analytics_report,
    conversion_rate,
    week_bucket,
)

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)  # a Sunday


@dataclass
class Row:
    product_id: uuid.UUID
    status: str
    total: Decimal
    created_at: datetime


def row(product_id, status, total, days_ago=0, hours_ago=0):
    return Row(product_id, status, Decimal(total), NOW - timedelta(days=days_ago, hours=hours_ago))


class TestBuildAnalyticsReport:
    """Pure aggregation over loaded orders."""

    def test_status_revenue_counts_delivered_only(self):
        """Trend totals include every order; the status view credits delivered orders."""
        product_id = uuid.uuid4()
        orders = [
            row(product_id, "delivered", "100.00"),
            row(product_id, "new", "200.00"),
            row(product_id, "cancelled", "300.00"),
        ]

        report = build_analytics_report(orders, AnalyticsPeriod.LAST_30_DAYS, {str(product_id): "T-Shirt"}, now=NOW)

        assert report.total_orders == 3
        breakdown = {item.status: (item.count, str(item.revenue)) for item in report.order_status_breakdown}
        assert breakdown == {
            "new": (1, "0.00"),
            "delivered": (1, "100.00"),
            "cancelled": (1, "0.00"),
        }
        assert [item.status for item in report.order_status_breakdown] == ["new", "delivered", "cancelled"]

        assert len(report.sales_trend) == 1
        assert str(report.sales_trend[0].revenue) == "600.00"
        assert report.sales_trend[0].orders == 3

        assert str(report.top_products[0].revenue) == "600.00"
        assert report.top_products[0].product_name == "T-Shirt"
        assert report.conversion_rate == Decimal("33.33")

    def test_empty_window(self):
        report = build_analytics_report([], AnalyticsPeriod.LAST_7_DAYS, {}, now=NOW)

        assert report.total_orders == 0
        assert report.sales_trend == []
        assert report.order_status_breakdown == []
        assert report.revenue_trend == []
        assert report.top_products == []
        assert report.conversion_rate == Decimal("0.00")

    def test_orders_outside_window_are_ignored(self):
        product_id = uuid.uuid4()
        orders = [
            row(product_id, "delivered", "50.00", days_ago=2),
            row(product_id, "delivered", "70.00", days_ago=8),
        ]

        last_week = build_analytics_report(orders, AnalyticsPeriod.LAST_7_DAYS, {}, now=NOW)
        all_time = build_analytics_report(orders, AnalyticsPeriod.ALL_TIME, {}, now=NOW)

        assert last_week.total_orders == 1
        assert all_time.total_orders == 2

    def test_sales_trend_is_daily_and_ascending(self):
        product_id = uuid.uuid4()
        orders = [
            row(product_id, "new", "10.00", days_ago=1),
            row(product_id, "new", "20.00", days_ago=3),
            row(product_id, "new", "5.50", days_ago=1, hours_ago=2),
        ]

        report = build_analytics_report(orders, AnalyticsPeriod.LAST_7_DAYS, {}, now=NOW)

        assert [(point.date, str(point.revenue), point.orders) for point in report.sales_trend] == [
            ("2026-10-15", "20.00", 1),
            ("2026-10-17", "15.50", 2),
        ]

    def test_revenue_trend_is_daily_for_seven_days(self):
        product_id = uuid.uuid4()
        orders = [row(product_id, "new", "10.00", days_ago=1), row(product_id, "new", "10.00", days_ago=3)]

        report = build_analytics_report(orders, AnalyticsPeriod.LAST_7_DAYS, {}, now=NOW)

        assert [point.period for point in report.revenue_trend] == ["2026-10-15", "2026-10-17"]

    def test_revenue_trend_is_weekly_for_longer_windows(self):
        """Weeks start on Sunday."""
        product_id = uuid.uuid4()
        orders = [
            row(product_id, "new", "10.00", days_ago=0),   # Sun 18th
            row(product_id, "new", "20.00", days_ago=1),   # Sat 17th
            row(product_id, "new", "30.00", days_ago=4),   # Wed 14th
            row(product_id, "new", "40.00", days_ago=7),   # Sun 11th
            row(product_id, "new", "50.00", days_ago=8),   # Sat 10th
        ]

        report = build_analytics_report(orders, AnalyticsPeriod.LAST_30_DAYS, {}, now=NOW)

        assert [(point.period, str(point.revenue), point.orders) for point in report.revenue_trend] == [
            ("2026-10-04", "50.00", 1),
            ("2026-10-11", "90.00", 3),
            ("2026-10-18", "10.00", 1),
        ]

    def test_top_products_ranked_and_limited_to_ten(self):
        product_ids = [uuid.uuid4() for _ in range(12)]
        orders = [row(product_id, "new", f"{(index + 1) * 10}.00") for index, product_id in enumerate(product_ids)]

        report = build_analytics_report(orders, AnalyticsPeriod.ALL_TIME, {}, now=NOW)

        assert len(report.top_products) == 10
        assert report.top_products[0].product_id == str(product_ids[-1])
        assert str(report.top_products[0].revenue) == "120.00"
        assert str(report.top_products[-1].revenue) == "30.00"

    def test_missing_product_name_uses_placeholder(self):
        product_id = uuid.uuid4()

        report = build_analytics_report([row(product_id, "new", "10.00")], AnalyticsPeriod.ALL_TIME, {}, now=NOW)

        assert report.top_products[0].product_name == UNKNOWN_PRODUCT_NAME

    def test_naive_timestamps_are_treated_as_utc(self):
        product_id = uuid.uuid4()
        naive = Row(product_id, "new", Decimal("10.00"), datetime(2026, 10, 17, 23, 30))

        report = build_analytics_report([naive], AnalyticsPeriod.LAST_7_DAYS, {}, now=NOW)

        assert report.sales_trend[0].date == "2026-10-17"


class TestHelpers:

    @pytest.mark.parametrize("delivered,total,expected", [
        (0, 0, "0.00"),
        (1, 3, "33.33"),
        (2, 3, "66.67"),
        (5, 5, "100.00"),
    ])
    def test_conversion_rate(self, delivered, total, expected):
        assert conversion_rate(delivered, total) == Decimal(expected)

    def test_week_bucket_starts_on_sunday(self):
        assert week_bucket(datetime(2026, 10, 18, 0, 5, tzinfo=timezone.utc)).isoformat() == "2026-10-18"
        assert week_bucket(datetime(2026, 10, 24, 23, 59, tzinfo=timezone.utc)).isoformat() == "2026-10-18"
        assert week_bucket(datetime(2026, 10, 17, 23, 59, tzinfo=timezone.utc)).isoformat() == "2026-10-11"

    def test_unknown_period_is_rejected(self):
        with pytest.raises(InvalidInputError):
            AnalyticsPeriod.parse("1y")


@pytest.mark.asyncio
async def test_analytics_endpoint(client: AsyncClient, factory, auth_headers):
    """Analytics are computed from the store's own orders only."""
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    await factory.order(tenant, product, "100.00", status="delivered")
    await factory.order(tenant, product, "200.00", status="new")
    await factory.order(tenant, product, "300.00", status="cancelled")

    other, _ = await factory.tenant("karim-store")
    other_product = await factory.product(other)
    await factory.order(other, other_product, "999.00", status="delivered")

    response = await client.get("/api/analytics?period=30d", headers=auth_headers(user))

    assert response.status_code == 200
    attributes = response.json()["data"]["attributes"]
    assert attributes["period"] == "30d"
    assert attributes["total_orders"] == 3
    assert attributes["conversion_rate"] == "33.33"
    assert sum(Decimal(point["revenue"]) for point in attributes["sales_trend"]) == Decimal("600.00")
    delivered = next(item for item in attributes["order_status_breakdown"] if item["status"] == "delivered")
    assert delivered["revenue"] == "100.00"
    assert attributes["top_products"][0]["product_name"] == "T Shirt"


@pytest.mark.asyncio
async def test_analytics_rejects_unknown_period(client: AsyncClient, factory, auth_headers):
    _, user = await factory.tenant("rahim-store")

    response = await client.get("/api/analytics?period=1y", headers=auth_headers(user))

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "INVALID_PERIOD"


@pytest.mark.asyncio
async def test_analytics_requires_authentication(client: AsyncClient):
    response = await client.get("/api/analytics")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, factory, auth_headers):
    tenant, user = await factory.tenant("rahim-store")
    product = await factory.product(tenant)
    await factory.order(tenant, product, "100.00", status="delivered")
    await factory.order(tenant, product, "250.00", status="new")

    response = await client.get("/api/dashboard/stats", headers=auth_headers(user))

    assert response.status_code == 200
    attributes = response.json()["data"]["attributes"]
    assert attributes["total_products"] == 1
    assert attributes["total_orders"] == 2
    assert attributes["new_orders"] == 1
    assert attributes["total_revenue"] == "100.00"
