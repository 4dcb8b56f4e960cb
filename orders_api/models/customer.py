"""
Customer table
"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from orders_api.core.database import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False, index=True)
    city = Column(String(100))
    country = Column(String(50), index=True)
    phone = Column(String(20))

    # Customers with orders cannot be deleted (RESTRICT on orders.customer_id)
    orders = relationship("Order", back_populates="customer", passive_deletes="all")
