"""
Statistics Service - Read-only aggregations over current store state

Every view is recomputed on request (no caching). Conventions:
- money figures are Decimal rounded to cents; sums and averages over an
  empty set are zero, never None
- top-N rankings keep settings.TOP_N entries and break ties by entity id
- time buckets are labelled yyyy-mm-dd (day), yyyy-Www (week) and yyyy-mm
  (month), so sorting labels sorts periods chronologically
"""
import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy import case, desc, distinct, func
from sqlalchemy.orm import Session

from orders_api.core.clock import as_utc, utcnow
from orders_api.core.config import settings
from orders_api.core.errors import InvalidInputError, NotFoundError
from orders_api.domain.statistics import (
    ZERO,
    CountByCategory,
    CustomerStatistics,
    MonthlySales,
    OrderItemStatistics,
    OrderStatistics,
    Overview,
    PeriodWindow,
    PricePoint,
    ProductSales,
    ProductStatistics,
    RevenueByPeriod,
    RevenueSeries,
    SupplierBreakdown,
    SupplierPerformance,
    SupplierStatistics,
    TopNByMetric,
)
from orders_api.models import (
    Customer as CustomerRecord,
    Order as OrderRecord,
    OrderItem as OrderItemRecord,
    Product as ProductRecord,
    Supplier as SupplierRecord,
)
from orders_api.services.query import validate_date_range, validate_id

logger = logging.getLogger(__name__)

BUCKET_UNITS = ("day", "week", "month")

LINE_TOTAL = OrderItemRecord.unit_price * OrderItemRecord.quantity

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round an aggregate to cents; None (empty set) becomes zero"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def average(total, count: int) -> Decimal:
    if not count:
        return ZERO
    return to_money(Decimal(total or 0) / count)


def bucket_label(moment: datetime, unit: str) -> str:
    """
    Label of the time bucket containing `moment`

    Weeks are counted from January 1st: week = (day_of_year - 1) // 7 + 1,
    so the last days of a year fall into week 53.
    """
    if unit == "day":
        return moment.strftime("%Y-%m-%d")
    if unit == "week":
        week = (moment.timetuple().tm_yday - 1) // 7 + 1
        return f"{moment.year}-W{week:02d}"
    if unit == "month":
        return f"{moment.year}-{moment.month:02d}"
    raise InvalidInputError(f"Period must be one of: {', '.join(BUCKET_UNITS)}.")


class StatisticsService:
    """
    Derived views for customers, suppliers, products, orders and items

    Args:
        db: Session to read from
        clock: Returns the current UTC instant (injectable for tests)
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.clock = clock

    # ========================================================================
    # Customers
    # ========================================================================

    def customer_statistics(self) -> CustomerStatistics:
        total = self.db.query(func.count(CustomerRecord.id)).scalar()
        with_orders = self.db.query(func.count(distinct(OrderRecord.customer_id))).scalar()

        return CustomerStatistics(
            total_customers=total,
            customers_with_orders=with_orders,
            customers_without_orders=total - with_orders,
            top_countries=self._top_countries(CustomerRecord),
        )

    def _top_countries(self, model) -> List[CountByCategory]:
        count = func.count(model.id)
        rows = (
            self.db.query(model.country, count)
            .filter(model.country.isnot(None), model.country != "")
            .group_by(model.country)
            .order_by(desc(count), model.country)
            .limit(settings.TOP_N)
            .all()
        )
        return [CountByCategory(category=country, count=n) for country, n in rows]

    # ========================================================================
    # Suppliers
    # ========================================================================

    def supplier_statistics(self) -> SupplierStatistics:
        total = self.db.query(func.count(SupplierRecord.id)).scalar()
        with_products = self.db.query(func.count(distinct(ProductRecord.supplier_id))).scalar()
        with_active = (
            self.db.query(func.count(distinct(ProductRecord.supplier_id)))
            .filter(ProductRecord.is_discontinued.is_(False))
            .scalar()
        )

        return SupplierStatistics(
            overview=Overview(counts={
                "total_suppliers": total,
                "suppliers_with_products": with_products,
                "suppliers_without_products": total - with_products,
                "suppliers_with_active_products": with_active,
            }),
            top_countries=self._top_countries(SupplierRecord),
            top_by_product_count=self._top_suppliers_by_product_count(),
            top_by_revenue=self._top_suppliers_by_revenue(),
        )

    def _top_suppliers_by_product_count(self) -> List[TopNByMetric]:
        product_count = func.count(ProductRecord.id)
        active_count = func.sum(case((ProductRecord.is_discontinued.is_(False), 1), else_=0))
        rows = (
            self.db.query(
                SupplierRecord.id,
                SupplierRecord.company_name,
                SupplierRecord.country,
                product_count.label("product_count"),
                active_count.label("active_count"),
            )
            .join(ProductRecord, ProductRecord.supplier_id == SupplierRecord.id)
            .group_by(SupplierRecord.id, SupplierRecord.company_name, SupplierRecord.country)
            .order_by(desc(product_count), SupplierRecord.id)
            .limit(settings.TOP_N)
            .all()
        )
        return [
            TopNByMetric(
                entity_id=row.id,
                name=row.company_name,
                metric="product_count",
                value=row.product_count,
                extra={"country": row.country, "active_products": int(row.active_count or 0)},
            )
            for row in rows
        ]

    def _top_suppliers_by_revenue(self) -> List[TopNByMetric]:
        revenue = func.sum(LINE_TOTAL)
        rows = (
            self.db.query(SupplierRecord.id, SupplierRecord.company_name, revenue.label("revenue"))
            .join(ProductRecord, ProductRecord.supplier_id == SupplierRecord.id)
            .join(OrderItemRecord, OrderItemRecord.product_id == ProductRecord.id)
            .group_by(SupplierRecord.id, SupplierRecord.company_name)
            .having(revenue > 0)
            .order_by(desc(revenue), SupplierRecord.id)
            .limit(settings.TOP_N)
            .all()
        )
        return [
            TopNByMetric(
                entity_id=row.id,
                name=row.company_name,
                metric="revenue",
                value=to_money(row.revenue),
            )
            for row in rows
        ]

    def supplier_performance(self, supplier_id: int) -> SupplierPerformance:
        """
        Product and sales figures of one supplier

        Raises:
            NotFoundError: Supplier does not exist
        """
        validate_id(supplier_id, "supplier")
        supplier = self.db.get(SupplierRecord, supplier_id)
        if supplier is None:
            raise NotFoundError(f"Supplier with ID {supplier_id} not found.")

        products = (
            self.db.query(
                func.count(ProductRecord.id),
                func.sum(case((ProductRecord.is_discontinued.is_(False), 1), else_=0)),
                func.avg(ProductRecord.unit_price),
            )
            .filter(ProductRecord.supplier_id == supplier_id)
            .one()
        )
        total_products, active_products, average_price = products
        active_products = int(active_products or 0)

        quantity, revenue, order_count = (
            self.db.query(
                func.sum(OrderItemRecord.quantity),
                func.sum(LINE_TOTAL),
                func.count(distinct(OrderItemRecord.order_id)),
            )
            .join(ProductRecord, OrderItemRecord.product_id == ProductRecord.id)
            .filter(ProductRecord.supplier_id == supplier_id)
            .one()
        )
        revenue = to_money(revenue)

        since = self.clock() - relativedelta(months=settings.TREND_MONTHS)
        trend_rows = self._item_rows_since(since, ProductRecord.supplier_id == supplier_id)

        return SupplierPerformance(
            supplier_id=supplier.id,
            company_name=supplier.company_name,
            contact_name=supplier.contact_name,
            city=supplier.city,
            country=supplier.country,
            product_overview=Overview(
                counts={
                    "total_products": total_products,
                    "active_products": active_products,
                    "discontinued_products": total_products - active_products,
                },
                amounts={"average_product_price": to_money(average_price)},
            ),
            sales_metrics=Overview(
                counts={"total_quantity_sold": int(quantity or 0), "total_orders": order_count},
                amounts={
                    "total_revenue": revenue,
                    "average_order_value": average(revenue, order_count),
                },
            ),
            sales_trend=monthly_sales(trend_rows),
            top_products=self._top_products_of_supplier(supplier_id),
        )

    def _top_products_of_supplier(self, supplier_id: int) -> List[TopNByMetric]:
        quantity = func.coalesce(func.sum(OrderItemRecord.quantity), 0)
        rows = (
            self.db.query(
                ProductRecord.id,
                ProductRecord.product_name,
                ProductRecord.unit_price,
                ProductRecord.is_discontinued,
                quantity.label("quantity"),
                func.sum(LINE_TOTAL).label("revenue"),
            )
            .outerjoin(OrderItemRecord, OrderItemRecord.product_id == ProductRecord.id)
            .filter(ProductRecord.supplier_id == supplier_id)
            .group_by(
                ProductRecord.id,
                ProductRecord.product_name,
                ProductRecord.unit_price,
                ProductRecord.is_discontinued,
            )
            .order_by(desc(quantity), ProductRecord.id)
            .limit(settings.TOP_N)
            .all()
        )
        return [
            TopNByMetric(
                entity_id=row.id,
                name=row.product_name,
                metric="quantity_sold",
                value=int(row.quantity),
                extra={
                    "unit_price": to_money(row.unit_price),
                    "is_discontinued": row.is_discontinued,
                    "revenue": to_money(row.revenue),
                },
            )
            for row in rows
        ]

    # ========================================================================
    # Products
    # ========================================================================

    def product_statistics(self) -> ProductStatistics:
        total, active, average_price = self.db.query(
            func.count(ProductRecord.id),
            func.sum(case((ProductRecord.is_discontinued.is_(False), 1), else_=0)),
            func.avg(ProductRecord.unit_price),
        ).one()
        active = int(active or 0)

        return ProductStatistics(
            overview=Overview(
                counts={
                    "total_products": total,
                    "active_products": active,
                    "discontinued_products": total - active,
                },
                amounts={"average_price": to_money(average_price)},
            ),
            most_expensive=self._price_point(desc(ProductRecord.unit_price)),
            cheapest=self._price_point(ProductRecord.unit_price),
            by_supplier=self._products_by_supplier(),
            top_selling=self._top_selling_products(),
        )

    def _price_point(self, price_order) -> Optional[PricePoint]:
        row = (
            self.db.query(ProductRecord, SupplierRecord.company_name)
            .join(SupplierRecord, ProductRecord.supplier_id == SupplierRecord.id)
            .order_by(price_order, ProductRecord.id)
            .first()
        )
        if row is None:
            return None

        product, supplier_name = row
        return PricePoint(
            product_id=product.id,
            product_name=product.product_name,
            unit_price=to_money(product.unit_price),
            supplier_name=supplier_name or "",
        )

    def _products_by_supplier(self) -> List[SupplierBreakdown]:
        product_count = func.count(ProductRecord.id)
        rows = (
            self.db.query(
                SupplierRecord.id,
                SupplierRecord.company_name,
                product_count.label("product_count"),
                func.sum(case((ProductRecord.is_discontinued.is_(False), 1), else_=0)).label("active_count"),
                func.avg(ProductRecord.unit_price).label("average_price"),
            )
            .join(ProductRecord, ProductRecord.supplier_id == SupplierRecord.id)
            .group_by(SupplierRecord.id, SupplierRecord.company_name)
            .order_by(desc(product_count), SupplierRecord.id)
            .all()
        )
        return [
            SupplierBreakdown(
                supplier_id=row.id,
                supplier_name=row.company_name,
                product_count=row.product_count,
                active_count=int(row.active_count or 0),
                average_price=to_money(row.average_price),
            )
            for row in rows
        ]

    def _top_selling_products(self) -> List[TopNByMetric]:
        quantity = func.sum(OrderItemRecord.quantity)
        rows = (
            self.db.query(
                ProductRecord.id,
                ProductRecord.product_name,
                quantity.label("quantity"),
                func.sum(LINE_TOTAL).label("revenue"),
            )
            .join(OrderItemRecord, OrderItemRecord.product_id == ProductRecord.id)
            .group_by(ProductRecord.id, ProductRecord.product_name)
            .order_by(desc(quantity), ProductRecord.id)
            .limit(settings.TOP_N)
            .all()
        )
        return [
            TopNByMetric(
                entity_id=row.id,
                name=row.product_name,
                metric="quantity_sold",
                value=int(row.quantity),
                extra={"revenue": to_money(row.revenue)},
            )
            for row in rows
        ]

    def product_sales(
        self,
        product_id: int,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> ProductSales:
        """
        Sales of one product, optionally restricted to orders in [date_from, date_to]

        A product without sales yields a zero-filled result.

        Raises:
            NotFoundError: Product does not exist
            InvalidInputError: date_from is after date_to
        """
        validate_id(product_id, "product")
        date_from = as_utc(date_from) if date_from else None
        date_to = as_utc(date_to) if date_to else None
        validate_date_range(date_from, date_to)

        product = self.db.get(ProductRecord, product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found.")

        query = (
            self.db.query(
                func.count(OrderItemRecord.id),
                func.sum(OrderItemRecord.quantity),
                func.sum(LINE_TOTAL),
                func.count(distinct(OrderItemRecord.order_id)),
                func.avg(OrderItemRecord.unit_price),
                func.min(OrderRecord.order_date),
                func.max(OrderRecord.order_date),
            )
            .join(OrderRecord, OrderItemRecord.order_id == OrderRecord.id)
            .filter(OrderItemRecord.product_id == product_id)
        )
        if date_from is not None:
            query = query.filter(OrderRecord.order_date >= date_from)
        if date_to is not None:
            query = query.filter(OrderRecord.order_date <= date_to)

        lines, quantity, revenue, order_count, average_price, first, last = query.one()

        if not lines:
            return ProductSales(
                product_id=product_id,
                product_name=product.product_name,
                date_from=date_from,
                date_to=date_to,
            )

        return ProductSales(
            product_id=product_id,
            product_name=product.product_name,
            total_quantity_sold=int(quantity),
            total_revenue=to_money(revenue),
            order_count=order_count,
            average_quantity_per_order=average(quantity, lines),
            average_price=to_money(average_price),
            date_from=date_from or as_utc(first),
            date_to=date_to or as_utc(last),
        )

    # ========================================================================
    # Orders and items
    # ========================================================================

    def order_statistics(self) -> OrderStatistics:
        now = self.clock()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        total_orders, total_revenue = self.db.query(
            func.count(OrderRecord.id), func.sum(OrderRecord.total_amount)
        ).one()
        total_revenue = to_money(total_revenue)

        since = now - relativedelta(months=settings.TREND_MONTHS)

        return OrderStatistics(
            overview=Overview(
                counts={"total_orders": total_orders},
                amounts={
                    "total_revenue": total_revenue,
                    "average_order_value": average(total_revenue, total_orders),
                },
            ),
            today=self._window("today", today),
            last_7_days=self._window("last_7_days", today - timedelta(days=7)),
            last_30_days=self._window("last_30_days", today - timedelta(days=30)),
            top_customer=self._top_customer(),
            monthly_trend=monthly_sales(self._item_rows_since(since)),
        )

    def _window(self, label: str, since: datetime) -> PeriodWindow:
        orders, revenue = (
            self.db.query(func.count(OrderRecord.id), func.sum(OrderRecord.total_amount))
            .filter(OrderRecord.order_date >= since)
            .one()
        )
        return PeriodWindow(label=label, orders=orders, revenue=to_money(revenue))

    def _top_customer(self) -> Optional[TopNByMetric]:
        spent = func.sum(OrderRecord.total_amount)
        row = (
            self.db.query(
                CustomerRecord.id,
                CustomerRecord.first_name,
                CustomerRecord.last_name,
                func.count(OrderRecord.id).label("order_count"),
                spent.label("spent"),
            )
            .join(OrderRecord, OrderRecord.customer_id == CustomerRecord.id)
            .group_by(CustomerRecord.id, CustomerRecord.first_name, CustomerRecord.last_name)
            .order_by(desc(spent), CustomerRecord.id)
            .first()
        )
        if row is None:
            return None

        return TopNByMetric(
            entity_id=row.id,
            name=f"{row.first_name} {row.last_name}",
            metric="total_spent",
            value=to_money(row.spent),
            extra={"total_orders": row.order_count},
        )

    def _item_rows_since(self, since: datetime, *criteria) -> List[Tuple]:
        """(order_id, order_date, quantity, line_total) of items ordered since `since`"""
        query = (
            self.db.query(
                OrderItemRecord.order_id,
                OrderRecord.order_date,
                OrderItemRecord.quantity,
                OrderItemRecord.unit_price,
            )
            .join(OrderRecord, OrderItemRecord.order_id == OrderRecord.id)
            .join(ProductRecord, OrderItemRecord.product_id == ProductRecord.id)
            .filter(OrderRecord.order_date >= since, *criteria)
        )
        return [
            (order_id, as_utc(order_date), quantity, unit_price * quantity)
            for order_id, order_date, quantity, unit_price in query.all()
        ]

    def order_item_statistics(self) -> OrderItemStatistics:
        lines, quantity, revenue, average_price = self.db.query(
            func.count(OrderItemRecord.id),
            func.sum(OrderItemRecord.quantity),
            func.sum(LINE_TOTAL),
            func.avg(OrderItemRecord.unit_price),
        ).one()

        return OrderItemStatistics(
            overview=Overview(
                counts={"total_order_items": lines, "total_quantity_sold": int(quantity or 0)},
                amounts={
                    "total_revenue": to_money(revenue),
                    "average_price": to_money(average_price),
                    "average_quantity_per_item": average(quantity, lines),
                },
            ),
            top_selling=self._top_selling_products(),
        )

    def revenue_by_period(
        self,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        unit: str = "day",
    ) -> RevenueSeries:
        """
        Orders and revenue grouped into day, week or month buckets

        Args:
            date_from: Range start (default: REVENUE_DEFAULT_DAYS days ago)
            date_to: Range end (default: now)
            unit: Bucket unit, one of day/week/month

        Returns:
            RevenueSeries with one entry per non-empty bucket, ascending

        Raises:
            InvalidInputError: Unknown unit, or date_from after date_to
        """
        unit = (unit or "").lower()
        if unit not in BUCKET_UNITS:
            raise InvalidInputError(f"Period must be one of: {', '.join(BUCKET_UNITS)}.")

        now = self.clock()
        start = as_utc(date_from) if date_from else now - timedelta(days=settings.REVENUE_DEFAULT_DAYS)
        end = as_utc(date_to) if date_to else now
        validate_date_range(start, end)

        rows = (
            self.db.query(OrderRecord.order_date, OrderRecord.total_amount)
            .filter(OrderRecord.order_date >= start, OrderRecord.order_date <= end)
            .all()
        )

        buckets = {}
        for order_date, amount in rows:
            label = bucket_label(as_utc(order_date), unit)
            count, revenue = buckets.get(label, (0, ZERO))
            buckets[label] = (count + 1, revenue + amount)

        logger.debug(f"Revenue by {unit}: {len(rows)} orders in {len(buckets)} buckets")

        return RevenueSeries(
            unit=unit,
            date_from=start,
            date_to=end,
            data=[
                RevenueByPeriod(period=label, order_count=count, revenue=to_money(revenue))
                for label, (count, revenue) in sorted(buckets.items())
            ],
        )


def monthly_sales(rows: Iterable[Tuple]) -> List[MonthlySales]:
    """Group (order_id, order_date, quantity, line_total) rows by calendar month"""
    months = OrderedDict()
    for order_id, order_date, quantity, line_total in sorted(rows, key=lambda row: row[1]):
        key = (order_date.year, order_date.month)
        orders, total_quantity, revenue = months.get(key, (set(), 0, ZERO))
        orders.add(order_id)
        months[key] = (orders, total_quantity + quantity, revenue + line_total)

    return [
        MonthlySales(
            year=year,
            month=month,
            order_count=len(orders),
            quantity=quantity,
            revenue=to_money(revenue),
        )
        for (year, month), (orders, quantity, revenue) in months.items()
    ]
