"""
Statistics Domain Models

Named result variants for every derived view the statistics engine
produces. All money figures are Decimal; empty sets yield zeros, never
None averages.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Union
from datetime import datetime
from decimal import Decimal


ZERO = Decimal("0.00")


def _plain(value):
    """Recursively convert Decimal to float and datetime to ISO strings"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class StatisticsModel(BaseModel):
    """Base for result variants: JSON-friendly dict conversion"""

    def to_dict(self) -> dict:
        return _plain(self.model_dump())


class CountByCategory(StatisticsModel):
    """Number of records sharing one category value (e.g. a country)"""
    category: str
    count: int


class RevenueByPeriod(StatisticsModel):
    """Orders and revenue falling into one time bucket"""
    period: str = Field(..., description="Bucket label (yyyy-mm-dd, yyyy-Www or yyyy-mm)")
    order_count: int = 0
    revenue: Decimal = ZERO


class RevenueSeries(StatisticsModel):
    """Time-bucketed revenue for a date range"""
    unit: str
    date_from: datetime
    date_to: datetime
    data: List[RevenueByPeriod] = Field(default_factory=list)


class TopNByMetric(StatisticsModel):
    """
    One entry of a top-N ranking

    metric names what value ranks the entries (revenue, quantity_sold,
    product_count, customer_spend); extra carries the other figures the
    ranking reports for the entity.
    """
    entity_id: int
    name: str
    metric: str
    value: Union[int, Decimal]
    extra: Dict[str, Union[Decimal, int, str, bool, None]] = Field(default_factory=dict)


class Overview(StatisticsModel):
    """Headline counts and money figures of one entity type"""
    counts: Dict[str, int] = Field(default_factory=dict)
    amounts: Dict[str, Decimal] = Field(default_factory=dict)


class PeriodWindow(StatisticsModel):
    """Orders and revenue since a point in time"""
    label: str
    orders: int = 0
    revenue: Decimal = ZERO


class PricePoint(StatisticsModel):
    """A product picked for its price (most expensive / cheapest)"""
    product_id: int
    product_name: str
    unit_price: Decimal
    supplier_name: str = ""


class SupplierBreakdown(StatisticsModel):
    supplier_id: int
    supplier_name: str
    product_count: int
    active_count: int
    average_price: Decimal = ZERO


class MonthlySales(StatisticsModel):
    """Monthly aggregate used by the 12-month trend views"""
    year: int
    month: int
    order_count: int = 0
    quantity: int = 0
    revenue: Decimal = ZERO


class CustomerStatistics(StatisticsModel):
    total_customers: int
    customers_with_orders: int
    customers_without_orders: int
    top_countries: List[CountByCategory] = Field(default_factory=list)


class SupplierStatistics(StatisticsModel):
    overview: Overview
    top_countries: List[CountByCategory] = Field(default_factory=list)
    top_by_product_count: List[TopNByMetric] = Field(default_factory=list)
    top_by_revenue: List[TopNByMetric] = Field(default_factory=list)


class SupplierPerformance(StatisticsModel):
    supplier_id: int
    company_name: str
    contact_name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    product_overview: Overview
    sales_metrics: Overview
    sales_trend: List[MonthlySales] = Field(default_factory=list)
    top_products: List[TopNByMetric] = Field(default_factory=list)


class ProductStatistics(StatisticsModel):
    overview: Overview
    most_expensive: Optional[PricePoint] = None
    cheapest: Optional[PricePoint] = None
    by_supplier: List[SupplierBreakdown] = Field(default_factory=list)
    top_selling: List[TopNByMetric] = Field(default_factory=list)


class OrderStatistics(StatisticsModel):
    overview: Overview
    today: PeriodWindow
    last_7_days: PeriodWindow
    last_30_days: PeriodWindow
    top_customer: Optional[TopNByMetric] = None
    monthly_trend: List[MonthlySales] = Field(default_factory=list)


class OrderItemStatistics(StatisticsModel):
    overview: Overview
    top_selling: List[TopNByMetric] = Field(default_factory=list)


class ProductSales(StatisticsModel):
    """Sales of one product, optionally restricted to a date range"""
    product_id: int
    product_name: str = ""
    total_quantity_sold: int = 0
    total_revenue: Decimal = ZERO
    order_count: int = 0
    average_quantity_per_order: Decimal = ZERO
    average_price: Decimal = ZERO
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
