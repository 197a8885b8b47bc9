"""
Pydantic schemas for Customer.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import List, Optional


class CustomerBase(BaseModel):
    """Base customer schema with common fields."""
    first_name: str
    last_name: str
    email: str
    phone: str
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None


class CustomerCreate(CustomerBase):
    """Schema for creating a customer."""
    pass


class CustomerUpdate(BaseModel):
    """Schema for updating a customer."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    notes: Optional[str] = None


class Customer(CustomerBase):
    """Schema for customer responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    # Relations, filled in on demand
    vehicles: Optional[List["Vehicle"]] = None
    repairs: Optional[List["Repair"]] = None
    invoices: Optional[List["Invoice"]] = None
    appointments: Optional[List["Appointment"]] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
