"""
User repository.

Permissions are derived from the role whenever a user is created without an
explicit permission list, and again whenever the role changes.
"""
from datetime import datetime, timezone
from typing import List, Optional, Union

from garage.repositories.base import BaseRepository
from garage.schemas.user import User, UserCreate, UserRole, UserUpdate, permissions_for


class UserRepository(BaseRepository[User]):
    table = "users"
    entity_schema = User
    create_schema = UserCreate
    update_schema = UserUpdate

    async def _prepare_create(self, payload):
        if not payload.get("permissions"):
            payload["permissions"] = permissions_for(payload["role"])
        return payload

    async def _prepare_update(self, entity_id, changes):
        if changes.get("role") and "permissions" not in changes:
            changes["permissions"] = permissions_for(changes["role"])
        return changes

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.find_one_by({"email": email})

    async def find_by_username(self, username: str) -> Optional[User]:
        return await self.find_one_by({"username": username})

    async def find_by_role(self, role: Union[str, UserRole]) -> List[User]:
        return await self.find_by({"role": UserRole(role)})

    async def find_active(self) -> List[User]:
        return await self.find_by({"is_active": True})

    async def find_mechanics(self) -> List[User]:
        return await self.find_by_role(UserRole.MECHANIC)

    async def find_admins(self) -> List[User]:
        return await self.find_by_role(UserRole.ADMIN)

    async def activate(self, user_id: str) -> Optional[User]:
        return await self.update(user_id, {"is_active": True})

    async def deactivate(self, user_id: str) -> Optional[User]:
        return await self.update(user_id, {"is_active": False})

    async def update_password(self, user_id: str, password: str) -> Optional[User]:
        # Stored as given; hashing belongs to the authentication layer
        return await self.update(user_id, {"password": password})

    async def update_permissions(self, user_id: str, permissions: List[str]) -> Optional[User]:
        return await self.update(user_id, {"permissions": permissions})

    async def has_permission(self, user_id: str, permission: str) -> bool:
        user = await self.find_by_id(user_id)
        return user is not None and user.has_permission(permission)

    async def authenticate(self, username: str, password: str) -> Optional[User]:
        """The active user matching the credentials, or None. Stamps ``last_login``."""
        found = await self.manager.find_by(self.table, {"username": username, "is_active": True})
        if not found or found[0].get("password") != password:
            return None
        return await self.update(found[0]["id"], {"last_login": datetime.now(timezone.utc)})
