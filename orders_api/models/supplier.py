"""
Supplier table
"""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from orders_api.core.database import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)

    company_name = Column(String(100), nullable=False, index=True)
    contact_name = Column(String(100))
    city = Column(String(100))
    country = Column(String(50), index=True)
    phone = Column(String(20))
    fax = Column(String(20))

    products = relationship("Product", back_populates="supplier", passive_deletes="all")
