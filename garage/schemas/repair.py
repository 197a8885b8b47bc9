"""
Pydantic schemas for Repair.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from typing import List, Optional
import enum


class RepairStatus(str, enum.Enum):
    """Repair status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RepairPriority(str, enum.Enum):
    """Repair priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Localized and legacy spellings still found in stored data
STATUS_ALIASES = {
    "en_attente": RepairStatus.PENDING,
    "en_cours": RepairStatus.IN_PROGRESS,
    "termine": RepairStatus.COMPLETED,
    "annule": RepairStatus.CANCELLED,
}


def normalize_status(value):
    """Map localized or hyphenated status spellings onto RepairStatus values."""
    if isinstance(value, str) and not isinstance(value, RepairStatus):
        key = value.strip().lower().replace("-", "_")
        return STATUS_ALIASES.get(key, key)
    return value


class RepairPart(BaseModel):
    """A stock part used by a repair."""
    part_id: str
    quantity: int = Field(gt=0)
    unit_price: float = Field(ge=0)
    total_price: float = 0

    @model_validator(mode="after")
    def compute_total(self):
        self.total_price = round(self.quantity * self.unit_price, 2)
        return self


class RepairBase(BaseModel):
    """Base repair schema with common fields."""
    vehicle_id: str
    customer_id: str
    mechanic_id: Optional[str] = None
    title: str
    description: str
    status: RepairStatus = RepairStatus.PENDING
    priority: RepairPriority = RepairPriority.MEDIUM
    estimated_cost: float = 0
    actual_cost: float = 0
    estimated_duration: Optional[float] = None
    labor_hours: float = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    parts: List[RepairPart] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value):
        return normalize_status(value)


class RepairCreate(RepairBase):
    """Schema for creating a repair."""
    pass


class RepairUpdate(BaseModel):
    """Schema for updating a repair."""
    vehicle_id: Optional[str] = None
    customer_id: Optional[str] = None
    mechanic_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[RepairStatus] = None
    priority: Optional[RepairPriority] = None
    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
    estimated_duration: Optional[float] = None
    labor_hours: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    parts: Optional[List[RepairPart]] = None
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def check_status(cls, value):
        return normalize_status(value)


class Repair(RepairBase):
    """Schema for repair responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    vehicle: Optional["Vehicle"] = None
    customer: Optional["Customer"] = None
    mechanic: Optional["Mechanic"] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def parts_total(self) -> float:
        return round(sum(part.total_price for part in self.parts), 2)
