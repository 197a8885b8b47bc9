"""
Pydantic schemas for User.
"""
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Dict, List, Optional
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    ADMIN = "admin"
    MANAGER = "manager"
    MECHANIC = "mechanic"
    RECEPTIONIST = "receptionist"


ROLE_PERMISSIONS: Dict[UserRole, List[str]] = {
    UserRole.ADMIN: [
        "users.create", "users.read", "users.update", "users.delete",
        "customers.create", "customers.read", "customers.update", "customers.delete",
        "vehicles.create", "vehicles.read", "vehicles.update", "vehicles.delete",
        "repairs.create", "repairs.read", "repairs.update", "repairs.delete",
        "invoices.create", "invoices.read", "invoices.update", "invoices.delete",
        "reports.read",
        "settings.update",
    ],
    UserRole.MANAGER: [
        "customers.create", "customers.read", "customers.update",
        "vehicles.create", "vehicles.read", "vehicles.update",
        "repairs.create", "repairs.read", "repairs.update",
        "invoices.create", "invoices.read", "invoices.update",
        "reports.read",
    ],
    UserRole.MECHANIC: [
        "customers.read",
        "vehicles.read", "vehicles.update",
        "repairs.create", "repairs.read", "repairs.update",
    ],
    UserRole.RECEPTIONIST: [
        "customers.create", "customers.read", "customers.update",
        "vehicles.create", "vehicles.read",
        "repairs.read",
        "invoices.read",
    ],
}


def permissions_for(role) -> List[str]:
    """Default permission set of a role."""
    return list(ROLE_PERMISSIONS.get(UserRole(role), []))


class UserBase(BaseModel):
    """Base user schema with common fields."""
    username: str
    email: str
    first_name: str
    last_name: str
    role: UserRole = UserRole.MECHANIC
    is_active: bool = True


class UserCreate(UserBase):
    """Schema for creating a user."""
    password: str
    permissions: Optional[List[str]] = None


class UserUpdate(BaseModel):
    """Schema for updating a user."""
    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None
    permissions: Optional[List[str]] = None
    is_active: Optional[bool] = None
    last_login: Optional[datetime] = None


class User(UserBase):
    """Schema for user responses. The password is never exposed."""
    id: str
    permissions: List[str] = Field(default_factory=list)
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    def has_permission(self, permission: str) -> bool:
        return self.role == UserRole.ADMIN or permission in self.permissions
