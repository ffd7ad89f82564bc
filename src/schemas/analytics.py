"""Analytics and dashboard schemas."""

from decimal import Decimal
from typing import Annotated, List

from pydantic import Field, PlainSerializer

from .base import BaseSchema, MoneyAmount

Percentage = Annotated[
    Decimal,
    PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json"),
]


class TrendPointSchema(BaseSchema):
    date: str = Field(description="UTC calendar day, YYYY-MM-DD")
    revenue: MoneyAmount
    orders: int


class RevenuePointSchema(BaseSchema):
    period: str = Field(description="Day, or week start (Sunday) for windows longer than 7 days")
    revenue: MoneyAmount
    orders: int


class StatusBreakdownSchema(BaseSchema):
    status: str
    count: int
    revenue: MoneyAmount = Field(description="Delivered orders only")


class TopProductSchema(BaseSchema):
    product_id: str
    product_name: str
    orders: int
    revenue: MoneyAmount


class AnalyticsAttributes(BaseSchema):
    period: str
    total_orders: int
    sales_trend: List[TrendPointSchema]
    order_status_breakdown: List[StatusBreakdownSchema]
    revenue_trend: List[RevenuePointSchema]
    top_products: List[TopProductSchema]
    conversion_rate: Percentage = Field(description="Delivered / total x 100, two decimals")


class AnalyticsResource(BaseSchema):
    type: str = Field("analytics", description="Resource type")
    id: str
    attributes: AnalyticsAttributes


class AnalyticsResponse(BaseSchema):
    data: AnalyticsResource


class DashboardStatsAttributes(BaseSchema):
    total_products: int
    total_orders: int
    new_orders: int
    total_revenue: MoneyAmount


class DashboardStatsResource(BaseSchema):
    type: str = Field("dashboard_stats", description="Resource type")
    id: str
    attributes: DashboardStatsAttributes


class DashboardStatsResponse(BaseSchema):
    data: DashboardStatsResource
