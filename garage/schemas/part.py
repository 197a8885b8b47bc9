"""
Pydantic schemas for Part (stock item).
"""
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class PartBase(BaseModel):
    """Base part schema with common fields."""
    name: str
    reference: str
    category: str
    brand: Optional[str] = None
    unit_price: float
    stock: int = 0
    min_stock: int = 0
    supplier: Optional[str] = None
    description: Optional[str] = None


class PartCreate(PartBase):
    """Schema for creating a part."""
    pass


class PartUpdate(BaseModel):
    """Schema for updating a part."""
    name: Optional[str] = None
    reference: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    unit_price: Optional[float] = None
    stock: Optional[int] = None
    min_stock: Optional[int] = None
    supplier: Optional[str] = None
    description: Optional[str] = None


class Part(PartBase):
    """Schema for part responses."""
    id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock
