"""
Order aggregate tables: orders and their line items

Both tables carry a version counter used for optimistic concurrency;
a write against a row whose version changed since it was read raises
sqlalchemy.orm.exc.StaleDataError.
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, DECIMAL, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from orders_api.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(
        Integer, ForeignKey("customers.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    order_number = Column(String(32), nullable=False, unique=True, index=True)
    order_date = Column(DateTime(timezone=True), nullable=False, index=True)
    total_amount = Column(DECIMAL(12, 2), nullable=False)

    version = Column(Integer, nullable=False, default=1)

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __mapper_args__ = {"version_id_col": version}


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
        Index("ix_order_items_order_product", "order_id", "product_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(
        Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    # Price snapshot taken when the order was created
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)

    version = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", back_populates="order_items")

    __mapper_args__ = {"version_id_col": version}
