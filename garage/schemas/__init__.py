"""
Pydantic schemas for entity validation and responses.
"""
from garage.schemas.customer import CustomerBase, CustomerCreate, CustomerUpdate, Customer
from garage.schemas.vehicle import FuelType, VehicleBase, VehicleCreate, VehicleUpdate, Vehicle
from garage.schemas.repair import (
    RepairStatus, RepairPriority, RepairPart, RepairBase, RepairCreate, RepairUpdate, Repair,
)
from garage.schemas.user import UserRole, ROLE_PERMISSIONS, UserBase, UserCreate, UserUpdate, User
from garage.schemas.mechanic import MechanicBase, MechanicCreate, MechanicUpdate, Mechanic
from garage.schemas.part import PartBase, PartCreate, PartUpdate, Part
from garage.schemas.appointment import (
    AppointmentStatus, AppointmentType, AppointmentBase, AppointmentCreate, AppointmentUpdate, Appointment,
)
from garage.schemas.invoice import (
    InvoiceStatus, InvoiceItemType, InvoiceItem, InvoiceBase, InvoiceCreate, InvoiceUpdate, Invoice,
    InvoiceBalance,
)
from garage.schemas.payment import PaymentMethod, PaymentBase, PaymentCreate, PaymentRequest, PaymentUpdate, Payment

__all__ = [
    "CustomerBase", "CustomerCreate", "CustomerUpdate", "Customer",
    "FuelType", "VehicleBase", "VehicleCreate", "VehicleUpdate", "Vehicle",
    "RepairStatus", "RepairPriority", "RepairPart", "RepairBase", "RepairCreate", "RepairUpdate", "Repair",
    "UserRole", "ROLE_PERMISSIONS", "UserBase", "UserCreate", "UserUpdate", "User",
    "MechanicBase", "MechanicCreate", "MechanicUpdate", "Mechanic",
    "PartBase", "PartCreate", "PartUpdate", "Part",
    "AppointmentStatus", "AppointmentType", "AppointmentBase", "AppointmentCreate", "AppointmentUpdate",
    "Appointment",
    "InvoiceStatus", "InvoiceItemType", "InvoiceItem", "InvoiceBase", "InvoiceCreate", "InvoiceUpdate", "Invoice",
    "InvoiceBalance",
    "PaymentMethod", "PaymentBase", "PaymentCreate", "PaymentRequest", "PaymentUpdate", "Payment",
    "ENTITY_TYPES",
]

# Response schema of each table, used to type hydrated relations
ENTITY_TYPES = {
    "customers": Customer,
    "vehicles": Vehicle,
    "repairs": Repair,
    "users": User,
    "mechanics": Mechanic,
    "parts": Part,
    "appointments": Appointment,
    "invoices": Invoice,
    "payments": Payment,
}

# Relation fields refer to each other across modules
_namespace = {model.__name__: model for model in ENTITY_TYPES.values()}
for _model in ENTITY_TYPES.values():
    _model.model_rebuild(_types_namespace=_namespace)
