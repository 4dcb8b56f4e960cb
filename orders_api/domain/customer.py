"""
Customer Domain Model
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class Customer(BaseModel):
    """
    Customer domain model

    Fields:
        id: Internal customer ID
        first_name: Customer first name
        last_name: Customer last name
        city: City (optional)
        country: Country (optional)
        phone: Phone number (optional)
    """

    id: int = Field(..., description="Customer ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    city: Optional[str] = Field(None, description="City")
    country: Optional[str] = Field(None, description="Country")
    phone: Optional[str] = Field(None, description="Phone number")

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        """First and last name joined by a space"""
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict:
        data = self.model_dump()
        data['full_name'] = self.full_name
        return data


class CustomerCreate(BaseModel):
    """Schema for creating a customer"""
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)


class CustomerUpdate(CustomerCreate):
    """Schema for updating a customer (full replacement, like create)"""
