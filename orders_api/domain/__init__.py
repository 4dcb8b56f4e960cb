"""
Domain Layer - Business Entities

Pydantic models for the records the core returns and the commands it
accepts. These enforce type safety and input validation across the
application.
"""
from orders_api.domain.customer import Customer, CustomerCreate, CustomerUpdate
from orders_api.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from orders_api.domain.product import Product, ProductCreate, ProductUpdate, ProductPriceUpdate
from orders_api.domain.order import Order, OrderItem, OrderCreate, OrderItemCreate, OrderItemUpdate
from orders_api.domain.pagination import Page

__all__ = [
    'Customer', 'CustomerCreate', 'CustomerUpdate',
    'Supplier', 'SupplierCreate', 'SupplierUpdate',
    'Product', 'ProductCreate', 'ProductUpdate', 'ProductPriceUpdate',
    'Order', 'OrderItem', 'OrderCreate', 'OrderItemCreate', 'OrderItemUpdate',
    'Page',
]
