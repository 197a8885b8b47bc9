"""
Mechanic repository.
"""
from typing import List

from garage.repositories.base import BaseRepository
from garage.schemas.mechanic import Mechanic, MechanicCreate, MechanicUpdate


class MechanicRepository(BaseRepository[Mechanic]):
    table = "mechanics"
    entity_schema = Mechanic
    create_schema = MechanicCreate
    update_schema = MechanicUpdate

    async def find_active(self) -> List[Mechanic]:
        return await self.find_by({"is_active": True})

    async def find_by_specialty(self, specialty: str) -> List[Mechanic]:
        wanted = specialty.casefold()
        return [
            mechanic for mechanic in await self.find_all()
            if any(s.casefold() == wanted for s in mechanic.specialties)
        ]

    async def find_with_repairs(self, mechanic_id: str):
        return await self.find_with_relations(mechanic_id, ["repairs"])
