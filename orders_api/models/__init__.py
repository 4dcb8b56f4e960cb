"""
Database models (record store tables)
"""
from .customer import Customer
from .supplier import Supplier
from .product import Product
from .order import Order, OrderItem

__all__ = [
    "Customer",
    "Supplier",
    "Product",
    "Order",
    "OrderItem",
]
