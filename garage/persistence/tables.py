"""
Table definitions of the garage.

Registered once at startup by ``build_default_registry``.
"""
from pydantic import EmailStr, TypeAdapter, ValidationError

from garage.persistence.schema import Constraint, FieldDefinition as F, Reference, Relation, SchemaRegistry, TableSchema

_email_adapter = TypeAdapter(EmailStr)


def is_email(value) -> bool:
    try:
        _email_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def is_positive(value) -> bool:
    return isinstance(value, (int, float)) and value > 0


def is_non_negative(value) -> bool:
    return isinstance(value, (int, float)) and value >= 0


def _foreign_key(field: str, table: str, message: str) -> Constraint:
    return Constraint(type="foreign_key", field=field, reference=Reference(table=table), message=message)


def _timestamps():
    return {
        "id": F(type="string", required=True),
        "created_at": F(type="date", required=True),
        "updated_at": F(type="date", required=True),
    }


CUSTOMERS = TableSchema(
    name="customers",
    fields={
        **_timestamps(),
        "first_name": F(type="string", required=True, min_length=2, max_length=100),
        "last_name": F(type="string", required=True, min_length=2, max_length=100),
        "email": F(type="string", required=True, unique=True),
        "phone": F(type="string", required=True, max_length=30),
        "address": F(type="string"),
        "city": F(type="string"),
        "postal_code": F(type="string", max_length=20),
        "notes": F(type="string"),
    },
    constraints=[
        Constraint(type="unique", field="email", message="This email is already used"),
        Constraint(type="check", field="email", condition=is_email, message="The email address is not valid"),
    ],
    indexes=["email", "last_name", "first_name"],
)

VEHICLES = TableSchema(
    name="vehicles",
    fields={
        **_timestamps(),
        "customer_id": F(type="string", required=True),
        "brand": F(type="string", required=True),
        "model": F(type="string", required=True),
        "year": F(type="number", required=True),
        "license_plate": F(type="string", required=True, unique=True, max_length=20),
        "vin": F(type="string", max_length=17),
        "color": F(type="string"),
        "mileage": F(type="number", default=0),
        "fuel_type": F(type="string"),
        "transmission": F(type="string"),
        "photos": F(type="array", default=[]),
        "notes": F(type="string"),
    },
    constraints=[
        Constraint(type="unique", field="license_plate", message="This license plate is already registered"),
        _foreign_key("customer_id", "customers", "The referenced customer does not exist"),
        Constraint(type="check", field="mileage", condition=is_non_negative, message="Mileage cannot be negative"),
    ],
    indexes=["customer_id", "license_plate", "brand", "model"],
)

REPAIRS = TableSchema(
    name="repairs",
    fields={
        **_timestamps(),
        "vehicle_id": F(type="string", required=True),
        "customer_id": F(type="string", required=True),
        "mechanic_id": F(type="string"),
        "title": F(type="string", required=True),
        "description": F(type="string", required=True),
        "status": F(type="string", required=True, default="pending"),
        "priority": F(type="string", default="medium"),
        "estimated_cost": F(type="number", default=0),
        "actual_cost": F(type="number", default=0),
        "estimated_duration": F(type="number"),
        "labor_hours": F(type="number", default=0),
        "start_date": F(type="date"),
        "end_date": F(type="date"),
        "parts": F(type="array", default=[]),
        "notes": F(type="string"),
    },
    constraints=[
        _foreign_key("vehicle_id", "vehicles", "The referenced vehicle does not exist"),
        _foreign_key("customer_id", "customers", "The referenced customer does not exist"),
        _foreign_key("mechanic_id", "mechanics", "The referenced mechanic does not exist"),
    ],
    indexes=["vehicle_id", "customer_id", "status", "start_date"],
)

USERS = TableSchema(
    name="users",
    fields={
        **_timestamps(),
        "username": F(type="string", required=True, unique=True, min_length=3, max_length=50),
        "email": F(type="string", required=True, unique=True),
        "first_name": F(type="string", required=True),
        "last_name": F(type="string", required=True),
        "password": F(type="string", required=True, min_length=6),
        "role": F(type="string", required=True, default="mechanic"),
        "permissions": F(type="array", default=[]),
        "is_active": F(type="boolean", default=True),
        "last_login": F(type="date"),
    },
    constraints=[
        Constraint(type="unique", field="username", message="This username is already taken"),
        Constraint(type="unique", field="email", message="This email is already used"),
        Constraint(type="check", field="email", condition=is_email, message="The email address is not valid"),
    ],
    indexes=["email", "role"],
)

MECHANICS = TableSchema(
    name="mechanics",
    fields={
        **_timestamps(),
        "first_name": F(type="string", required=True),
        "last_name": F(type="string", required=True),
        "email": F(type="string", required=True, unique=True),
        "phone": F(type="string", required=True),
        "specialties": F(type="array", default=[]),
        "hourly_rate": F(type="number", default=0),
        "is_active": F(type="boolean", default=True),
    },
    constraints=[
        Constraint(type="unique", field="email", message="This email is already used"),
        Constraint(type="check", field="hourly_rate", condition=is_non_negative, message="The hourly rate cannot be negative"),
    ],
    indexes=["email"],
)

PARTS = TableSchema(
    name="parts",
    fields={
        **_timestamps(),
        "name": F(type="string", required=True),
        "reference": F(type="string", required=True, unique=True),
        "category": F(type="string", required=True),
        "brand": F(type="string"),
        "unit_price": F(type="number", required=True),
        "stock": F(type="number", default=0),
        "min_stock": F(type="number", default=0),
        "supplier": F(type="string"),
        "description": F(type="string"),
    },
    constraints=[
        Constraint(type="unique", field="reference", message="This part reference already exists"),
        Constraint(type="check", field="stock", condition=is_non_negative, message="Stock cannot be negative"),
        Constraint(type="check", field="unit_price", condition=is_non_negative, message="The unit price cannot be negative"),
    ],
    indexes=["reference", "category"],
)

APPOINTMENTS = TableSchema(
    name="appointments",
    fields={
        **_timestamps(),
        "customer_id": F(type="string", required=True),
        "vehicle_id": F(type="string", required=True),
        "mechanic_id": F(type="string"),
        "title": F(type="string", required=True),
        "description": F(type="string"),
        "date": F(type="date", required=True),
        "duration": F(type="number", required=True),
        "status": F(type="string", required=True, default="scheduled"),
        "type": F(type="string", required=True),
    },
    constraints=[
        _foreign_key("customer_id", "customers", "The referenced customer does not exist"),
        _foreign_key("vehicle_id", "vehicles", "The referenced vehicle does not exist"),
        _foreign_key("mechanic_id", "mechanics", "The referenced mechanic does not exist"),
        Constraint(type="check", field="duration", condition=is_positive, message="The duration must be positive"),
    ],
    indexes=["date", "customer_id"],
)

INVOICES = TableSchema(
    name="invoices",
    fields={
        **_timestamps(),
        "number": F(type="string", required=True, unique=True),
        "customer_id": F(type="string", required=True),
        "repair_id": F(type="string"),
        "date": F(type="date", required=True),
        "due_date": F(type="date", required=True),
        "items": F(type="array", default=[]),
        "subtotal": F(type="number", default=0),
        "tax_rate": F(type="number", default=0),
        "tax_amount": F(type="number", default=0),
        "total": F(type="number", default=0),
        "status": F(type="string", required=True, default="draft"),
        "payment_method": F(type="string"),
        "payment_date": F(type="date"),
        "notes": F(type="string"),
    },
    constraints=[
        Constraint(type="unique", field="number", message="This invoice number already exists"),
        _foreign_key("customer_id", "customers", "The referenced customer does not exist"),
        _foreign_key("repair_id", "repairs", "The referenced repair does not exist"),
    ],
    indexes=["number", "customer_id", "status"],
)

PAYMENTS = TableSchema(
    name="payments",
    fields={
        **_timestamps(),
        "invoice_id": F(type="string", required=True),
        "customer_id": F(type="string", required=True),
        "amount": F(type="number", required=True),
        "method": F(type="string", required=True),
        "reference": F(type="string"),
        "date": F(type="date", required=True),
        "notes": F(type="string"),
    },
    constraints=[
        _foreign_key("invoice_id", "invoices", "The referenced invoice does not exist"),
        _foreign_key("customer_id", "customers", "The referenced customer does not exist"),
        Constraint(type="check", field="amount", condition=is_positive, message="The payment amount must be positive"),
    ],
    indexes=["invoice_id"],
)

ALL_TABLES = [CUSTOMERS, VEHICLES, REPAIRS, USERS, MECHANICS, PARTS, APPOINTMENTS, INVOICES, PAYMENTS]

RELATIONS = {
    "customers": [
        Relation(type="one_to_many", entity="vehicles", field="vehicles", mapped_by="customer_id"),
        Relation(type="one_to_many", entity="repairs", field="repairs", mapped_by="customer_id"),
        Relation(type="one_to_many", entity="invoices", field="invoices", mapped_by="customer_id"),
        Relation(type="one_to_many", entity="appointments", field="appointments", mapped_by="customer_id"),
    ],
    "vehicles": [
        Relation(type="many_to_one", entity="customers", field="customer", inversed_by="vehicles"),
        Relation(type="one_to_many", entity="repairs", field="repairs", mapped_by="vehicle_id"),
        Relation(type="one_to_many", entity="appointments", field="appointments", mapped_by="vehicle_id"),
    ],
    "repairs": [
        Relation(type="many_to_one", entity="vehicles", field="vehicle", inversed_by="repairs"),
        Relation(type="many_to_one", entity="customers", field="customer", inversed_by="repairs"),
        Relation(type="many_to_one", entity="mechanics", field="mechanic", inversed_by="repairs"),
    ],
    "mechanics": [
        Relation(type="one_to_many", entity="repairs", field="repairs", mapped_by="mechanic_id"),
    ],
    "appointments": [
        Relation(type="many_to_one", entity="customers", field="customer", inversed_by="appointments"),
        Relation(type="many_to_one", entity="vehicles", field="vehicle", inversed_by="appointments"),
    ],
    "invoices": [
        Relation(type="many_to_one", entity="customers", field="customer", inversed_by="invoices"),
        Relation(type="one_to_one", entity="repairs", field="repair"),
        Relation(type="one_to_many", entity="payments", field="payments", mapped_by="invoice_id"),
    ],
    "payments": [
        Relation(type="many_to_one", entity="invoices", field="invoice", inversed_by="payments"),
    ],
}


def build_default_registry() -> SchemaRegistry:
    """Registry with every garage table and relation."""
    registry = SchemaRegistry()
    for schema in ALL_TABLES:
        registry.define_table(schema.name, schema)
    for table, relations in RELATIONS.items():
        for relation in relations:
            registry.add_relation(table, relation)
    registry.check_integrity()
    return registry
