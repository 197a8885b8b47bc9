"""
Pydantic schemas for Vehicle.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional
import enum


class FuelType(str, enum.Enum):
    """Fuel type enumeration."""
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    ELECTRIC = "electric"
    HYBRID = "hybrid"
    LPG = "lpg"
    OTHER = "other"


class VehicleBase(BaseModel):
    """Base vehicle schema with common fields."""
    customer_id: str
    brand: str
    model: str
    year: int
    license_plate: str
    vin: Optional[str] = None
    color: Optional[str] = None
    mileage: int = 0
    fuel_type: Optional[FuelType] = None
    transmission: Optional[str] = None
    photos: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class VehicleCreate(VehicleBase):
    """Schema for creating a vehicle."""
    pass


class VehicleUpdate(BaseModel):
    """Schema for updating a vehicle."""
    customer_id: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    license_plate: Optional[str] = None
    vin: Optional[str] = None
    color: Optional[str] = None
    mileage: Optional[int] = None
    fuel_type: Optional[FuelType] = None
    transmission: Optional[str] = None
    photos: Optional[List[str]] = None
    notes: Optional[str] = None


class Vehicle(VehicleBase):
    """Schema for vehicle responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    customer: Optional["Customer"] = None
    repairs: Optional[List["Repair"]] = None
    appointments: Optional[List["Appointment"]] = None

    model_config = ConfigDict(from_attributes=True)
