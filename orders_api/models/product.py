"""
Product table
"""
from sqlalchemy import Column, Integer, String, Boolean, DECIMAL, ForeignKey, CheckConstraint, false
from sqlalchemy.orm import relationship

from orders_api.core.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("unit_price > 0", name="ck_products_unit_price_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    supplier_id = Column(
        Integer, ForeignKey("suppliers.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    product_name = Column(String(100), nullable=False, index=True)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    package = Column(String(100))
    is_discontinued = Column(Boolean, nullable=False, default=False, server_default=false(), index=True)

    supplier = relationship("Supplier", back_populates="products")
    order_items = relationship("OrderItem", back_populates="product", passive_deletes="all")
