"""
Appointment repository.
"""
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Union

from garage.repositories.base import BaseRepository
from garage.schemas.appointment import Appointment, AppointmentCreate, AppointmentStatus, AppointmentUpdate


class AppointmentRepository(BaseRepository[Appointment]):
    table = "appointments"
    entity_schema = Appointment
    create_schema = AppointmentCreate
    update_schema = AppointmentUpdate

    async def find_by_date(self, day: date) -> List[Appointment]:
        """Appointments of one calendar day (UTC), earliest first."""
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        query = (
            self.create_query_builder()
            .where("date", ">=", start)
            .where("date", "<", start + timedelta(days=1))
            .order_by("date")
        )
        return await self.execute(query)

    async def find_today(self) -> List[Appointment]:
        return await self.find_by_date(datetime.now(timezone.utc).date())

    async def find_by_customer(self, customer_id: str) -> List[Appointment]:
        return await self.find_by({"customer_id": customer_id})

    async def find_by_vehicle(self, vehicle_id: str) -> List[Appointment]:
        return await self.find_by({"vehicle_id": vehicle_id})

    async def update_status(
        self, appointment_id: str, status: Union[str, AppointmentStatus]
    ) -> Optional[Appointment]:
        return await self.update(appointment_id, {"status": AppointmentStatus(status)})
