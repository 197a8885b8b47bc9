"""
Pydantic schemas for Payment.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone
from typing import Optional
import enum


class PaymentMethod(str, enum.Enum):
    """Payment method enumeration."""
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"
    CHECK = "check"


class PaymentBase(BaseModel):
    """Base payment schema with common fields."""
    amount: float
    method: PaymentMethod
    reference: Optional[str] = None
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    notes: Optional[str] = None


class PaymentCreate(PaymentBase):
    """Schema for recording a payment against an invoice."""
    invoice_id: str
    customer_id: str


class PaymentRequest(PaymentBase):
    """Payment data when the invoice is known from the route."""
    pass


class Payment(PaymentBase):
    """Schema for payment responses."""
    id: str
    invoice_id: str
    customer_id: str
    created_at: datetime
    updated_at: datetime

    invoice: Optional["Invoice"] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentUpdate(BaseModel):
    """Schema for updating a payment. Amounts are immutable once recorded."""
    reference: Optional[str] = None
    notes: Optional[str] = None
