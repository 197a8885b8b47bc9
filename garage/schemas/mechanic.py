"""
Pydantic schemas for Mechanic.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List, Optional


class MechanicBase(BaseModel):
    """Base mechanic schema with common fields."""
    first_name: str
    last_name: str
    email: str
    phone: str
    specialties: List[str] = Field(default_factory=list)
    hourly_rate: float = 0
    is_active: bool = True


class MechanicCreate(MechanicBase):
    """Schema for creating a mechanic."""
    pass


class MechanicUpdate(BaseModel):
    """Schema for updating a mechanic."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    specialties: Optional[List[str]] = None
    hourly_rate: Optional[float] = None
    is_active: Optional[bool] = None


class Mechanic(MechanicBase):
    """Schema for mechanic responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    repairs: Optional[List["Repair"]] = None

    model_config = ConfigDict(from_attributes=True)
