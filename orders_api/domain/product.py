"""
Product Domain Model

Represents a product in the catalog. A product belongs to one supplier and
keeps its discontinued flag instead of being deleted once it has been
ordered.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from decimal import Decimal


class Product(BaseModel):
    """
    Product domain model

    Fields:
        id: Internal product ID
        product_name: Product name
        supplier_id: Owning supplier
        supplier_name: Supplier company name (from JOIN)
        unit_price: Current selling price (2 decimals)
        package: Package description (optional)
        is_discontinued: Blocks new orders when True
    """

    id: int = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name")
    supplier_id: int = Field(..., description="Supplier ID")
    supplier_name: str = Field("", description="Supplier company name (from JOIN)")
    unit_price: Decimal = Field(..., description="Unit price", gt=0)
    package: Optional[str] = Field(None, description="Package description")
    is_discontinued: bool = Field(False, description="Whether product is discontinued")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_active(self) -> bool:
        return not self.is_discontinued

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['unit_price'] = float(data['unit_price'])
        return data


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    product_name: str = Field(..., min_length=1, max_length=100)
    supplier_id: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    package: Optional[str] = Field(None, max_length=100)
    is_discontinued: bool = False


class ProductUpdate(ProductCreate):
    """Schema for updating an existing product"""


class ProductPriceUpdate(BaseModel):
    """Schema for changing only the price of a product"""
    unit_price: Decimal = Field(..., max_digits=10, decimal_places=2)
