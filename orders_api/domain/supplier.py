"""
Supplier Domain Model
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class Supplier(BaseModel):
    """Supplier domain model - a company that provides products"""

    id: int = Field(..., description="Supplier ID")
    company_name: str = Field(..., description="Company name")
    contact_name: Optional[str] = Field(None, description="Contact person")
    city: Optional[str] = Field(None, description="City")
    country: Optional[str] = Field(None, description="Country")
    phone: Optional[str] = Field(None, description="Phone number")
    fax: Optional[str] = Field(None, description="Fax number")

    model_config = ConfigDict(from_attributes=True)

    def to_dict(self) -> dict:
        return self.model_dump()


class SupplierCreate(BaseModel):
    """Schema for creating a supplier"""
    company_name: str = Field(..., min_length=1, max_length=100)
    contact_name: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)
    fax: Optional[str] = Field(None, max_length=20)


class SupplierUpdate(SupplierCreate):
    """Schema for updating a supplier"""
