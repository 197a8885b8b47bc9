"""
Stock part repository.
"""
import logging
from typing import List, Optional

from garage.exceptions import EntityValidationError
from garage.repositories.base import BaseRepository
from garage.schemas.part import Part, PartCreate, PartUpdate

logger = logging.getLogger(__name__)


class PartRepository(BaseRepository[Part]):
    table = "parts"
    entity_schema = Part
    create_schema = PartCreate
    update_schema = PartUpdate

    async def find_by_reference(self, reference: str) -> Optional[Part]:
        return await self.find_one_by({"reference": reference})

    async def find_by_category(self, category: str) -> List[Part]:
        return await self.find_by({"category": category})

    async def find_low_stock(self) -> List[Part]:
        """Parts at or below their minimum stock level."""
        return [part for part in await self.find_all() if part.is_low_stock]

    async def search(self, term: str) -> List[Part]:
        query = (
            self.create_query_builder()
            .or_where("name", "LIKE", term)
            .or_where("reference", "LIKE", term)
            .where("brand", "LIKE", term)
            .order_by("name")
        )
        return await self.execute(query)

    async def adjust_stock(self, part_id: str, delta: int) -> Optional[Part]:
        """Add ``delta`` units (negative to withdraw). Stock never goes below zero."""
        part = await self.find_by_id(part_id)
        if part is None:
            return None
        stock = part.stock + delta
        if stock < 0:
            raise EntityValidationError(
                [f"Not enough stock for {part.reference}: {part.stock} available, {-delta} requested"]
            )
        updated = await self.update(part_id, {"stock": stock}, expected_updated_at=part.updated_at)
        if updated is None:
            return None
        if updated.is_low_stock:
            logger.warning("Part %s is low on stock (%d left)", part.reference, stock)
        return updated

    async def stock_value(self) -> float:
        return round(sum(part.stock * part.unit_price for part in await self.find_all()), 2)
