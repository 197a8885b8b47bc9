"""
Pydantic schemas for Appointment.
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
import enum


class AppointmentStatus(str, enum.Enum):
    """Appointment status enumeration."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AppointmentType(str, enum.Enum):
    """Appointment type enumeration."""
    DIAGNOSIS = "diagnosis"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    INSPECTION = "inspection"


class AppointmentBase(BaseModel):
    """Base appointment schema with common fields."""
    customer_id: str
    vehicle_id: str
    mechanic_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    date: datetime
    duration: int  # minutes
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    type: AppointmentType = AppointmentType.REPAIR


class AppointmentCreate(AppointmentBase):
    """Schema for creating an appointment."""
    pass


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment."""
    customer_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    mechanic_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    duration: Optional[int] = None
    status: Optional[AppointmentStatus] = None
    type: Optional[AppointmentType] = None


class Appointment(AppointmentBase):
    """Schema for appointment responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    customer: Optional["Customer"] = None
    vehicle: Optional["Vehicle"] = None

    model_config = ConfigDict(from_attributes=True)
