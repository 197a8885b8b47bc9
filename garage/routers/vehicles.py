"""
Vehicle routes.
"""
from fastapi import APIRouter, Body, Depends, status
from typing import List, Optional

from garage.repositories import VehicleRepository
from garage.routers.deps import get_vehicle_repository, not_found
from garage.schemas.vehicle import Vehicle, VehicleCreate, VehicleUpdate

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/", response_model=List[Vehicle])
async def get_vehicles(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[str] = None,
    search: Optional[str] = None,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Get all vehicles with pagination and optional customer or brand/model filter.
    """
    if customer_id:
        return (await repo.find_by_customer(customer_id))[skip:skip + limit]
    if search:
        return (await repo.search_by_brand_model(search))[skip:skip + limit]
    return await repo.find_list(skip, limit)


@router.get("/plate/{license_plate}", response_model=Vehicle)
async def get_vehicle_by_plate(
    license_plate: str,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Get a vehicle by its license plate.
    """
    vehicle = await repo.find_by_license_plate(license_plate)
    if not vehicle:
        raise not_found("Vehicle")
    return vehicle


@router.get("/{vehicle_id}", response_model=Vehicle)
async def get_vehicle(
    vehicle_id: str,
    with_customer: bool = False,
    with_repairs: bool = False,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Get a specific vehicle by ID.
    """
    relations = [name for name, wanted in (("customer", with_customer), ("repairs", with_repairs)) if wanted]
    vehicle = await repo.find_with_relations(vehicle_id, relations)
    if not vehicle:
        raise not_found("Vehicle")
    return vehicle


@router.post("/", response_model=Vehicle, status_code=status.HTTP_201_CREATED)
async def create_vehicle(
    vehicle: VehicleCreate,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Create a new vehicle. The owner must exist and the plate must be unused.
    """
    return await repo.save(vehicle)


@router.put("/{vehicle_id}", response_model=Vehicle)
async def update_vehicle(
    vehicle_id: str,
    vehicle_update: VehicleUpdate,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Update a vehicle.
    """
    vehicle = await repo.update(vehicle_id, vehicle_update)
    if not vehicle:
        raise not_found("Vehicle")
    return vehicle


@router.post("/{vehicle_id}/photos", response_model=Vehicle)
async def add_vehicle_photo(
    vehicle_id: str,
    url: str = Body(..., embed=True),
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Attach a photo URL to a vehicle.
    """
    vehicle = await repo.add_photo(vehicle_id, url)
    if not vehicle:
        raise not_found("Vehicle")
    return vehicle


@router.delete("/{vehicle_id}/photos", response_model=Vehicle)
async def remove_vehicle_photo(
    vehicle_id: str,
    url: str,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Detach a photo URL from a vehicle.
    """
    vehicle = await repo.remove_photo(vehicle_id, url)
    if not vehicle:
        raise not_found("Vehicle")
    return vehicle


@router.delete("/{vehicle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vehicle(
    vehicle_id: str,
    repo: VehicleRepository = Depends(get_vehicle_repository),
):
    """
    Delete a vehicle.
    """
    if not await repo.delete(vehicle_id):
        raise not_found("Vehicle")
    return None
