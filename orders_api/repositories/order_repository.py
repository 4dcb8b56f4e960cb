"""
Order Repository - Data Access Layer for Orders

Handles all queries for orders and returns Order domain models with their
customer name and line items (including product names).
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from orders_api.core.config import settings
from orders_api.domain.order import Order, OrderItem
from orders_api.domain.pagination import Page
from orders_api.models import Order as OrderRecord, OrderItem as OrderItemRecord
from orders_api.services.query import PageRequest, paginate


def map_row_to_order_item(row: OrderItemRecord) -> OrderItem:
    return OrderItem(
        id=row.id,
        order_id=row.order_id,
        product_id=row.product_id,
        product_name=row.product.product_name if row.product else "",
        unit_price=row.unit_price,
        quantity=row.quantity,
    )


class OrderRepository:
    """
    Repository for Order data access

    Listings are ordered by order date descending, then id descending.
    Items are fetched with one extra SELECT per page (no N+1).
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _map_row_to_order(row: OrderRecord) -> Order:
        customer = row.customer
        return Order(
            id=row.id,
            order_number=row.order_number,
            order_date=row.order_date,
            customer_id=row.customer_id,
            customer_name=f"{customer.first_name} {customer.last_name}" if customer else "",
            total_amount=row.total_amount,
            items=[map_row_to_order_item(item) for item in row.items],
        )

    def _base_query(self):
        return self.db.query(OrderRecord).options(
            joinedload(OrderRecord.customer),
            selectinload(OrderRecord.items).joinedload(OrderItemRecord.product),
        )

    @staticmethod
    def _ordered(query):
        return query.order_by(OrderRecord.order_date.desc(), OrderRecord.id.desc())

    def get(self, order_id: int) -> Optional[OrderRecord]:
        """Load the ORM record with its items (for mutations)"""
        return (
            self.db.query(OrderRecord)
            .options(selectinload(OrderRecord.items))
            .filter(OrderRecord.id == order_id)
            .first()
        )

    def find_by_id(self, order_id: int) -> Optional[Order]:
        row = self._base_query().filter(OrderRecord.id == order_id).first()
        return self._map_row_to_order(row) if row else None

    def find_by_number(self, order_number: str) -> Optional[Order]:
        row = self._base_query().filter(OrderRecord.order_number == order_number).first()
        return self._map_row_to_order(row) if row else None

    def exists(self, order_id: int) -> bool:
        return self.db.query(
            self.db.query(OrderRecord).filter(OrderRecord.id == order_id).exists()
        ).scalar()

    def number_exists(self, order_number: str) -> bool:
        return self.db.query(
            self.db.query(OrderRecord).filter(OrderRecord.order_number == order_number).exists()
        ).scalar()

    def find_all(
        self,
        customer_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        request: PageRequest = PageRequest(),
    ) -> Page[Order]:
        """
        Find orders with filters

        Args:
            customer_id: Filter by owning customer
            date_from: Orders placed at or after this instant
            date_to: Orders placed at or before this instant
            min_amount: Lower bound of the total amount (inclusive)
            max_amount: Upper bound of the total amount (inclusive)
            request: Page to return
        """
        query = self._base_query()

        if customer_id is not None:
            query = query.filter(OrderRecord.customer_id == customer_id)

        if date_from is not None:
            query = query.filter(OrderRecord.order_date >= date_from)

        if date_to is not None:
            query = query.filter(OrderRecord.order_date <= date_to)

        if min_amount is not None:
            query = query.filter(OrderRecord.total_amount >= min_amount)

        if max_amount is not None:
            query = query.filter(OrderRecord.total_amount <= max_amount)

        return paginate(self._ordered(query), request, self._map_row_to_order)

    def find_by_customer(self, customer_id: int) -> List[Order]:
        rows = self._ordered(
            self._base_query().filter(OrderRecord.customer_id == customer_id)
        ).all()
        return [self._map_row_to_order(row) for row in rows]

    def find_since(self, since: datetime, limit: int = settings.RECENT_ORDERS_LIMIT) -> List[Order]:
        """Most recent orders placed at or after `since`"""
        rows = (
            self._ordered(self._base_query().filter(OrderRecord.order_date >= since))
            .limit(limit)
            .all()
        )
        return [self._map_row_to_order(row) for row in rows]

    def add(self, record: OrderRecord) -> OrderRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def delete(self, record: OrderRecord) -> None:
        self.db.delete(record)
        self.db.flush()
