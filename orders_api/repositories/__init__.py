"""
Repository Layer - Data Access

This layer handles all queries against the record store and returns
domain models. Repositories abstract away SQLAlchemy details from the
business rules in orders_api.services.
"""
from orders_api.repositories.customer_repository import CustomerRepository
from orders_api.repositories.supplier_repository import SupplierRepository
from orders_api.repositories.product_repository import ProductRepository
from orders_api.repositories.order_repository import OrderRepository
from orders_api.repositories.order_item_repository import OrderItemRepository

__all__ = [
    'CustomerRepository',
    'SupplierRepository',
    'ProductRepository',
    'OrderRepository',
    'OrderItemRepository',
]
