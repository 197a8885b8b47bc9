"""
Route dependencies.

The entity manager is created by the application lifespan and kept on
``app.state``; repositories are built per request around it.
"""
from fastapi import Depends, HTTPException, Request, status

from garage.config import Settings, get_settings
from garage.persistence.manager import EntityManager
from garage.repositories import (
    CustomerRepository,
    InvoiceRepository,
    RepairRepository,
    UserRepository,
    VehicleRepository,
)


def get_manager(request: Request) -> EntityManager:
    manager = getattr(request.app.state, "manager", None)
    if manager is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage service not available",
        )
    return manager


def get_customer_repository(manager: EntityManager = Depends(get_manager)) -> CustomerRepository:
    return CustomerRepository(manager)


def get_vehicle_repository(manager: EntityManager = Depends(get_manager)) -> VehicleRepository:
    return VehicleRepository(manager)


def get_repair_repository(manager: EntityManager = Depends(get_manager)) -> RepairRepository:
    return RepairRepository(manager)


def get_user_repository(manager: EntityManager = Depends(get_manager)) -> UserRepository:
    return UserRepository(manager)


def get_invoice_repository(
    manager: EntityManager = Depends(get_manager),
    settings: Settings = Depends(get_settings),
) -> InvoiceRepository:
    return InvoiceRepository(manager, default_tax_rate=settings.default_tax_rate)


def not_found(entity: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} not found")
