"""
Pydantic schemas for Invoice.
"""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Dict, FrozenSet, List, Optional
import enum
import uuid


class InvoiceStatus(str, enum.Enum):
    """Invoice status enumeration."""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InvoiceItemType(str, enum.Enum):
    """Invoice line type enumeration."""
    PART = "part"
    LABOR = "labor"
    SERVICE = "service"


# Allowed status changes; paid and cancelled are final
STATUS_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT, InvoiceStatus.CANCELLED}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED}),
    InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED}),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


class InvoiceItem(BaseModel):
    """One invoice line."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    description: str
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)
    total_price: float = 0
    type: InvoiceItemType = InvoiceItemType.SERVICE

    @model_validator(mode="after")
    def compute_total(self):
        self.total_price = round(self.quantity * self.unit_price, 2)
        return self


def compute_totals(items: List[dict], tax_rate: float) -> Dict[str, float]:
    """Subtotal, tax amount and total of a list of serialized invoice items."""
    subtotal = round(sum(item["total_price"] for item in items), 2)
    tax_amount = round(subtotal * tax_rate / 100, 2)
    return {
        "subtotal": subtotal,
        "tax_amount": tax_amount,
        "total": round(subtotal + tax_amount, 2),
    }


class InvoiceBase(BaseModel):
    """Base invoice schema with common fields."""
    customer_id: str
    repair_id: Optional[str] = None
    date: datetime
    due_date: datetime
    items: List[InvoiceItem] = Field(default_factory=list)
    tax_rate: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class InvoiceCreate(InvoiceBase):
    """Schema for creating an invoice. The number is generated when omitted."""
    number: Optional[str] = None


class InvoiceUpdate(BaseModel):
    """Schema for updating an invoice. Status changes go through transitions."""
    repair_id: Optional[str] = None
    date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    items: Optional[List[InvoiceItem]] = None
    tax_rate: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class Invoice(InvoiceBase):
    """Schema for invoice responses."""
    id: str
    number: str
    tax_rate: float = 0
    subtotal: float = 0
    tax_amount: float = 0
    total: float = 0
    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    customer: Optional["Customer"] = None
    repair: Optional["Repair"] = None
    payments: Optional[List["Payment"]] = None

    model_config = ConfigDict(from_attributes=True)


class InvoiceBalance(BaseModel):
    """Amounts owed on an invoice, derived from its payments."""
    invoice_id: str
    total: float
    paid_amount: float
    balance: float
    status: InvoiceStatus
