"""
Order Item Repository - Data Access Layer for Order Items
"""
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from orders_api.domain.order import OrderItem
from orders_api.models import OrderItem as OrderItemRecord
from orders_api.repositories.order_repository import map_row_to_order_item


class OrderItemRepository:
    """Repository for OrderItem data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_with_order(self, item_id: int) -> Optional[OrderItemRecord]:
        """Load an item together with its owning order (for mutations)"""
        return (
            self.db.query(OrderItemRecord)
            .options(joinedload(OrderItemRecord.order))
            .filter(OrderItemRecord.id == item_id)
            .first()
        )

    def find_by_id(self, item_id: int) -> Optional[OrderItem]:
        row = (
            self.db.query(OrderItemRecord)
            .options(joinedload(OrderItemRecord.product))
            .filter(OrderItemRecord.id == item_id)
            .first()
        )
        return map_row_to_order_item(row) if row else None

    def find_by_order(self, order_id: int) -> List[OrderItem]:
        rows = (
            self.db.query(OrderItemRecord)
            .options(joinedload(OrderItemRecord.product))
            .filter(OrderItemRecord.order_id == order_id)
            .order_by(OrderItemRecord.id)
            .all()
        )
        return [map_row_to_order_item(row) for row in rows]

    def exists(self, item_id: int) -> bool:
        return self.db.query(
            self.db.query(OrderItemRecord).filter(OrderItemRecord.id == item_id).exists()
        ).scalar()

    def count_for_order(self, order_id: int) -> int:
        return (
            self.db.query(func.count(OrderItemRecord.id))
            .filter(OrderItemRecord.order_id == order_id)
            .scalar()
        )

    def delete(self, record: OrderItemRecord) -> None:
        self.db.delete(record)
        self.db.flush()
