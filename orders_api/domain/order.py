"""
Order Domain Models

An order and its line items form one consistency boundary: the order total
always equals the sum of (unit price x quantity) over its items, and each
item's unit price is the product price captured when the order was placed.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from datetime import datetime
from decimal import Decimal


class OrderItem(BaseModel):
    """
    Order Item domain model - a line item in an order

    Fields:
        id: Order item ID
        order_id: Parent order ID
        product_id: Referenced product
        product_name: Product name (from JOIN)
        unit_price: Price snapshot taken at order creation
        quantity: Units ordered (>= 1)
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    product_id: int = Field(..., description="Product ID")
    product_name: str = Field("", description="Product name (from JOIN)")
    unit_price: Decimal = Field(..., description="Unit price at order time", ge=0)
    quantity: int = Field(..., description="Quantity ordered", ge=1)

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_total(self) -> Decimal:
        """Line total: unit price times quantity"""
        return self.unit_price * self.quantity

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['unit_price'] = float(self.unit_price)
        data['item_total'] = float(self.item_total)
        return data


class Order(BaseModel):
    """
    Order domain model - a customer order with its line items

    Fields:
        id: Internal order ID
        order_number: Unique generated order number
        order_date: Creation instant (UTC)
        customer_id: Owning customer
        customer_name: Customer full name (from JOIN)
        total_amount: Sum of the items' line totals
        items: Line items
    """

    id: int = Field(..., description="Order ID")
    order_number: str = Field(..., description="Order number")
    order_date: datetime = Field(..., description="Order date (UTC)")
    customer_id: int = Field(..., description="Customer ID")
    customer_name: str = Field("", description="Customer name (from JOIN)")
    total_amount: Decimal = Field(..., description="Total order amount", ge=0)
    items: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Decimals become floats and datetimes ISO strings for JSON.
        """
        data = self.model_dump()
        data['total_amount'] = float(self.total_amount)
        data['order_date'] = self.order_date.isoformat()
        data['item_count'] = self.item_count
        data['total_quantity'] = self.total_quantity
        data['items'] = [item.to_dict() for item in self.items]
        return data


class OrderItemCreate(BaseModel):
    """One requested line of a new order"""
    product_id: int
    quantity: int


class OrderCreate(BaseModel):
    """Schema for creating a new order"""
    customer_id: int
    items: List[OrderItemCreate] = Field(default_factory=list)


class OrderItemUpdate(BaseModel):
    """Schema for changing the quantity of an order item"""
    quantity: int
