"""
Orders API - order processing backend

Customers, suppliers, products and orders with line items.
"""
__version__ = "1.0.0"
