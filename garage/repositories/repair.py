"""
Repair repository with the reporting aggregates used by the dashboard.
"""
import calendar
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Union

from garage.exceptions import EntityValidationError
from garage.repositories.base import BaseRepository
from garage.schemas.repair import Repair, RepairCreate, RepairPriority, RepairStatus, RepairUpdate, normalize_status


def _status(value) -> RepairStatus:
    try:
        return RepairStatus(normalize_status(value))
    except ValueError:
        raise EntityValidationError([f"Unknown repair status {value!r}"]) from None


class RepairRepository(BaseRepository[Repair]):
    table = "repairs"
    entity_schema = Repair
    create_schema = RepairCreate
    update_schema = RepairUpdate

    async def find_by_status(self, status: Union[str, RepairStatus]) -> List[Repair]:
        """Repairs in ``status``; localized spellings are accepted."""
        wanted = _status(status)
        return [repair for repair in await self.find_all() if repair.status == wanted]

    async def find_by_vehicle(self, vehicle_id: str) -> List[Repair]:
        return await self.find_by({"vehicle_id": vehicle_id})

    async def find_by_customer(self, customer_id: str) -> List[Repair]:
        return await self.find_by({"customer_id": customer_id})

    async def find_by_mechanic(self, mechanic_id: str) -> List[Repair]:
        return await self.find_by({"mechanic_id": mechanic_id})

    async def find_by_priority(self, priority: Union[str, RepairPriority]) -> List[Repair]:
        return await self.find_by({"priority": RepairPriority(priority)})

    async def find_with_vehicle_and_customer(self, repair_id: str) -> Optional[Repair]:
        return await self.find_with_relations(repair_id, ["vehicle", "customer"])

    async def find_pending(self) -> List[Repair]:
        return await self.find_by_status(RepairStatus.PENDING)

    async def find_in_progress(self) -> List[Repair]:
        return await self.find_by_status(RepairStatus.IN_PROGRESS)

    async def find_completed(self) -> List[Repair]:
        return await self.find_by_status(RepairStatus.COMPLETED)

    async def find_by_date_range(self, start: datetime, end: datetime) -> List[Repair]:
        """Repairs started between ``start`` and ``end`` inclusive, latest first."""
        query = (
            self.create_query_builder()
            .where("start_date", ">=", start)
            .where("start_date", "<=", end)
            .order_by("start_date", "DESC")
        )
        return await self.execute(query)

    async def find_by_month(self, year: int, month: int) -> List[Repair]:
        last_day = calendar.monthrange(year, month)[1]
        start = datetime(year, month, 1, tzinfo=timezone.utc)
        end = datetime.combine(date(year, month, last_day), time.max, tzinfo=timezone.utc)
        return await self.find_by_date_range(start, end)

    async def update_status(self, repair_id: str, status: Union[str, RepairStatus]) -> Optional[Repair]:
        """
        Move a repair to a new status.

        Starting work stamps ``start_date`` and finishing it stamps
        ``end_date``, unless those dates were already set.
        """
        repair = await self.find_by_id(repair_id)
        if repair is None:
            return None

        status = _status(status)
        changes = {"status": status}
        now = datetime.now(timezone.utc)
        if status == RepairStatus.IN_PROGRESS and repair.start_date is None:
            changes["start_date"] = now
        if status == RepairStatus.COMPLETED:
            if repair.start_date is None:
                changes["start_date"] = now
            if repair.end_date is None:
                changes["end_date"] = now
        return await self.update(repair_id, changes)

    # Aggregates

    async def total_revenue(self) -> float:
        return round(sum(repair.actual_cost or 0 for repair in await self.find_all()), 2)

    async def revenue_by_month(self, year: int, month: int) -> float:
        return round(sum(repair.actual_cost or 0 for repair in await self.find_by_month(year, month)), 2)

    async def average_repair_cost(self) -> float:
        """Mean actual cost of completed repairs that carry a cost."""
        costs = [
            repair.actual_cost for repair in await self.find_completed()
            if repair.actual_cost
        ]
        if not costs:
            return 0
        return round(sum(costs) / len(costs), 2)

    async def mechanic_workload(self, mechanic_id: str) -> Dict[str, int]:
        repairs = await self.find_by_mechanic(mechanic_id)
        return {
            "total": len(repairs),
            "pending": sum(1 for repair in repairs if repair.status == RepairStatus.PENDING),
            "in_progress": sum(1 for repair in repairs if repair.status == RepairStatus.IN_PROGRESS),
        }
