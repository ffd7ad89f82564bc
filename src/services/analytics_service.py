"""Sales analytics aggregation.

Reports are recomputed from the order rows on every call; nothing is
materialized. :func:`build_analytics_report` is the pure aggregation over an
already-loaded order set and makes a single pass that feeds all five views.

Revenue rules differ between views on purpose:

* the status breakdown counts revenue for ``delivered`` orders only
  (operational, recognized revenue);
* sales trend, revenue trend and top products sum ``total`` regardless of
  status (demand signal).

Keep the two rules separate when changing either view.
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Protocol

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.order import Order, OrderStatus, ORDER_STATUSES
from src.models.product import Product
from src.models.tenant import Tenant
from src.services.business_rules import InvalidInputError
from src.utils.money import Money

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UNKNOWN_PRODUCT_NAME = "Unknown Product"
TOP_PRODUCTS_LIMIT = 10
PERCENT = Decimal("0.01")


class AnalyticsPeriod(str, Enum):
    """Reporting windows, counted back from now."""
    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_90_DAYS = "90d"
    ALL_TIME = "all"

    @property
    def days(self) -> Optional[int]:
        return {"7d": 7, "30d": 30, "90d": 90}.get(self.value)

    def cutoff(self, now: datetime) -> datetime:
        if self.days is None:
            return EPOCH
        return as_utc(now) - timedelta(days=self.days)

    @classmethod
    def parse(cls, value: str) -> "AnalyticsPeriod":
        try:
            return cls(value)
        except ValueError:
            raise InvalidInputError(
                f"Invalid analytics period '{value}'. Use one of: 7d, 30d, 90d, all",
                code="INVALID_PERIOD",
            )


class OrderRecord(Protocol):
    """The order fields the aggregation reads."""
    product_id: uuid.UUID
    status: str
    total: Decimal
    created_at: datetime


def as_utc(moment: datetime) -> datetime:
    # Naive timestamps come back from SQLite; they are stored as UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def day_bucket(moment: datetime) -> date:
    """Calendar day of a timestamp, UTC day boundaries."""
    return as_utc(moment).date()


def week_bucket(moment: datetime) -> date:
    """Start of the week containing the timestamp: the Sunday on or before it."""
    day = day_bucket(moment)
    days_since_sunday = (day.weekday() + 1) % 7
    return day - timedelta(days=days_since_sunday)


@dataclass
class TrendPoint:
    date: str
    revenue: Money
    orders: int


@dataclass
class RevenuePoint:
    period: str
    revenue: Money
    orders: int


@dataclass
class StatusBreakdown:
    status: str
    count: int
    revenue: Money


@dataclass
class TopProduct:
    product_id: str
    product_name: str
    orders: int
    revenue: Money


@dataclass
class AnalyticsReport:
    period: str
    total_orders: int
    sales_trend: List[TrendPoint] = field(default_factory=list)
    order_status_breakdown: List[StatusBreakdown] = field(default_factory=list)
    revenue_trend: List[RevenuePoint] = field(default_factory=list)
    top_products: List[TopProduct] = field(default_factory=list)
    conversion_rate: Decimal = Decimal("0.00")


class _Bucket:
    __slots__ = ("revenue", "orders")

    def __init__(self):
        self.revenue = Money.zero()
        self.orders = 0

    def add(self, amount: Money) -> None:
        self.revenue = self.revenue + amount
        self.orders += 1


def conversion_rate(delivered: int, total: int) -> Decimal:
    """delivered / total x 100, two decimals; zero for an empty window."""
    if total == 0:
        return Decimal("0.00")
    rate = Decimal(delivered) * 100 / Decimal(total)
    return rate.quantize(PERCENT, rounding=ROUND_HALF_UP)


def build_analytics_report(
    orders: Iterable[OrderRecord],
    period: AnalyticsPeriod,
    product_names: Mapping[str, str],
    now: Optional[datetime] = None,
) -> AnalyticsReport:
    """Aggregate one tenant's orders into the five analytics views."""
    now = now or datetime.now(timezone.utc)
    cutoff = period.cutoff(now)
    weekly = period != AnalyticsPeriod.LAST_7_DAYS

    daily: Dict[date, _Bucket] = {}
    revenue_buckets: Dict[date, _Bucket] = {}
    by_status: Dict[str, _Bucket] = {}
    by_product: "OrderedDict[str, _Bucket]" = OrderedDict()
    delivered_count = 0
    total_count = 0

    window = sorted(
        (order for order in orders if as_utc(order.created_at) >= cutoff),
        key=lambda order: as_utc(order.created_at),
    )
    for order in window:
        amount = Money.parse(order.total)
        delivered = order.status == OrderStatus.DELIVERED.value
        total_count += 1
        if delivered:
            delivered_count += 1

        daily.setdefault(day_bucket(order.created_at), _Bucket()).add(amount)

        revenue_key = week_bucket(order.created_at) if weekly else day_bucket(order.created_at)
        revenue_buckets.setdefault(revenue_key, _Bucket()).add(amount)

        status_bucket = by_status.setdefault(order.status, _Bucket())
        status_bucket.add(amount if delivered else Money.zero())

        by_product.setdefault(str(order.product_id), _Bucket()).add(amount)

    ranked = sorted(by_product.items(), key=lambda item: item[1].revenue, reverse=True)

    return AnalyticsReport(
        period=period.value,
        total_orders=total_count,
        sales_trend=[
            TrendPoint(date=day.isoformat(), revenue=bucket.revenue, orders=bucket.orders)
            for day, bucket in sorted(daily.items())
        ],
        order_status_breakdown=[
            StatusBreakdown(status=status, count=by_status[status].orders, revenue=by_status[status].revenue)
            for status in _status_order(by_status)
        ],
        revenue_trend=[
            RevenuePoint(period=key.isoformat(), revenue=bucket.revenue, orders=bucket.orders)
            for key, bucket in sorted(revenue_buckets.items())
        ],
        top_products=[
            TopProduct(
                product_id=product_id,
                product_name=product_names.get(product_id) or UNKNOWN_PRODUCT_NAME,
                orders=bucket.orders,
                revenue=bucket.revenue,
            )
            for product_id, bucket in ranked[:TOP_PRODUCTS_LIMIT]
        ],
        conversion_rate=conversion_rate(delivered_count, total_count),
    )


def _status_order(by_status: Mapping[str, _Bucket]) -> List[str]:
    known = [status for status in ORDER_STATUSES if status in by_status]
    return known + sorted(status for status in by_status if status not in ORDER_STATUSES)


@dataclass
class OrderStats:
    total_products: int
    total_orders: int
    new_orders: int
    total_revenue: Money


@dataclass
class PlatformStats:
    total_tenants: int
    active_tenants: int
    total_orders: int
    total_revenue: Money


class AnalyticsService:
    """Loads a tenant's order history and aggregates it. Read-only."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get_analytics(
        self,
        tenant_id: uuid.UUID,
        period: str = AnalyticsPeriod.LAST_30_DAYS.value,
        now: Optional[datetime] = None,
    ) -> AnalyticsReport:
        window = AnalyticsPeriod.parse(period)
        now = now or datetime.now(timezone.utc)

        result = await self.db.execute(
            select(Order.product_id, Order.status, Order.total, Order.created_at).where(
                and_(Order.tenant_id == tenant_id, Order.created_at >= window.cutoff(now))
            )
        )
        orders = result.all()

        product_names = await self._product_names(tenant_id, {order.product_id for order in orders})
        report = build_analytics_report(orders, window, product_names, now=now)
        logger.debug(f"Analytics for tenant {tenant_id} ({window.value}): {report.total_orders} orders")
        return report

    async def _product_names(self, tenant_id: uuid.UUID, product_ids: Iterable[uuid.UUID]) -> Dict[str, str]:
        ids = [product_id for product_id in product_ids if product_id is not None]
        if not ids:
            return {}
        try:
            result = await self.db.execute(
                select(Product.id, Product.name).where(
                    and_(Product.tenant_id == tenant_id, Product.id.in_(ids))
                )
            )
        except Exception as e:
            # Names are cosmetic; the report falls back to placeholders
            logger.error(f"Product name lookup failed for tenant {tenant_id}: {e}")
            return {}
        return {str(product_id): name for product_id, name in result.all()}

    async def get_order_stats(self, tenant_id: uuid.UUID) -> OrderStats:
        """Dashboard counters. Revenue counts delivered orders only."""
        products = await self.db.execute(
            select(func.count()).select_from(Product).where(Product.tenant_id == tenant_id)
        )
        result = await self.db.execute(select(Order.status, Order.total).where(Order.tenant_id == tenant_id))
        rows = result.all()
        return OrderStats(
            total_products=products.scalar_one(),
            total_orders=len(rows),
            new_orders=sum(1 for row in rows if row.status == OrderStatus.NEW.value),
            total_revenue=Money.sum(
                Money.parse(row.total) for row in rows if row.status == OrderStatus.DELIVERED.value
            ),
        )

    async def get_platform_stats(self) -> PlatformStats:
        tenants = (await self.db.execute(select(Tenant.status))).scalars().all()
        rows = (await self.db.execute(select(Order.status, Order.total))).all()
        return PlatformStats(
            total_tenants=len(tenants),
            active_tenants=sum(1 for status in tenants if status == "active"),
            total_orders=len(rows),
            total_revenue=Money.sum(
                Money.parse(row.total) for row in rows if row.status == OrderStatus.DELIVERED.value
            ),
        )
