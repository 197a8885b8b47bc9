"""
Vehicle repository.
"""
from typing import List, Optional

from garage.repositories.base import BaseRepository
from garage.schemas.repair import RepairStatus
from garage.schemas.vehicle import Vehicle, VehicleCreate, VehicleUpdate


class VehicleRepository(BaseRepository[Vehicle]):
    table = "vehicles"
    entity_schema = Vehicle
    create_schema = VehicleCreate
    update_schema = VehicleUpdate

    async def find_by_license_plate(self, license_plate: str) -> Optional[Vehicle]:
        return await self.find_one_by({"license_plate": license_plate})

    async def find_by_customer(self, customer_id: str) -> List[Vehicle]:
        return await self.find_by({"customer_id": customer_id})

    async def search_by_brand_model(self, term: str) -> List[Vehicle]:
        query = (
            self.create_query_builder()
            .or_where("brand", "LIKE", term)
            .where("model", "LIKE", term)
            .order_by("brand")
        )
        return await self.execute(query)

    async def find_by_year(self, year: int) -> List[Vehicle]:
        return await self.find_by({"year": year})

    async def find_by_year_range(self, start_year: int, end_year: int) -> List[Vehicle]:
        query = (
            self.create_query_builder()
            .where("year", ">=", start_year)
            .where("year", "<=", end_year)
            .order_by("year", "DESC")
        )
        return await self.execute(query)

    async def find_with_customer(self, vehicle_id: str) -> Optional[Vehicle]:
        return await self.find_with_relations(vehicle_id, ["customer"])

    async def find_with_repairs(self, vehicle_id: str) -> Optional[Vehicle]:
        return await self.find_with_relations(vehicle_id, ["repairs"])

    async def find_with_customer_and_repairs(self, vehicle_id: str) -> Optional[Vehicle]:
        return await self.find_with_relations(vehicle_id, ["customer", "repairs"])

    async def find_with_active_repairs(self) -> List[Vehicle]:
        """Vehicles that have at least one repair in progress."""
        repairs = await self.manager.find_by("repairs", {"status": RepairStatus.IN_PROGRESS.value})
        vehicle_ids = {repair["vehicle_id"] for repair in repairs}
        return [vehicle for vehicle in await self.find_all() if vehicle.id in vehicle_ids]

    async def add_photo(self, vehicle_id: str, photo: str) -> Optional[Vehicle]:
        vehicle = await self.find_by_id(vehicle_id)
        if vehicle is None:
            return None
        if photo in vehicle.photos:
            return vehicle
        return await self.update(vehicle_id, {"photos": [*vehicle.photos, photo]})

    async def remove_photo(self, vehicle_id: str, photo: str) -> Optional[Vehicle]:
        vehicle = await self.find_by_id(vehicle_id)
        if vehicle is None:
            return None
        return await self.update(vehicle_id, {"photos": [p for p in vehicle.photos if p != photo]})
