"""
Repair routes.
"""
from fastapi import APIRouter, Body, Depends, status
from typing import List, Optional

from garage.repositories import RepairRepository
from garage.routers.deps import get_repair_repository, not_found
from garage.schemas.repair import Repair, RepairCreate, RepairStatus, RepairUpdate

router = APIRouter(prefix="/repairs", tags=["repairs"])


@router.get("/", response_model=List[Repair])
async def get_repairs(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[RepairStatus] = None,
    vehicle_id: Optional[str] = None,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Get all repairs with pagination and optional status or vehicle filter.
    """
    if status_filter:
        return (await repo.find_by_status(status_filter))[skip:skip + limit]
    if vehicle_id:
        return (await repo.find_by_vehicle(vehicle_id))[skip:skip + limit]
    return await repo.find_list(skip, limit)


@router.get("/stats")
async def get_repair_stats(
    year: Optional[int] = None,
    month: Optional[int] = None,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Revenue figures. ``month`` revenue is included when both year and month are given.
    """
    stats = {
        "total_revenue": await repo.total_revenue(),
        "average_repair_cost": await repo.average_repair_cost(),
        "pending": len(await repo.find_pending()),
        "in_progress": len(await repo.find_in_progress()),
        "completed": len(await repo.find_completed()),
    }
    if year and month:
        stats["month_revenue"] = await repo.revenue_by_month(year, month)
    return stats


@router.get("/{repair_id}", response_model=Repair)
async def get_repair(
    repair_id: str,
    with_relations: bool = False,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Get a specific repair by ID, optionally with its vehicle, customer and mechanic.
    """
    relations = ["vehicle", "customer", "mechanic"] if with_relations else []
    repair = await repo.find_with_relations(repair_id, relations)
    if not repair:
        raise not_found("Repair")
    return repair


@router.post("/", response_model=Repair, status_code=status.HTTP_201_CREATED)
async def create_repair(
    repair: RepairCreate,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Create a new repair. The vehicle and customer must exist.
    """
    return await repo.save(repair)


@router.put("/{repair_id}", response_model=Repair)
async def update_repair(
    repair_id: str,
    repair_update: RepairUpdate,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Update a repair.
    """
    repair = await repo.update(repair_id, repair_update)
    if not repair:
        raise not_found("Repair")
    return repair


@router.patch("/{repair_id}/status", response_model=Repair)
async def update_repair_status(
    repair_id: str,
    new_status: str = Body(..., embed=True, alias="status"),
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Change the status of a repair, stamping start and end dates.
    """
    repair = await repo.update_status(repair_id, new_status)
    if not repair:
        raise not_found("Repair")
    return repair


@router.delete("/{repair_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_repair(
    repair_id: str,
    repo: RepairRepository = Depends(get_repair_repository),
):
    """
    Delete a repair.
    """
    if not await repo.delete(repair_id):
        raise not_found("Repair")
    return None
