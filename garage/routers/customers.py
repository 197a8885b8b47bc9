"""
Customer routes.
"""
from fastapi import APIRouter, Depends, status
from typing import List, Optional

from garage.repositories import CustomerRepository
from garage.routers.deps import get_customer_repository, not_found
from garage.schemas.customer import Customer, CustomerCreate, CustomerUpdate

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/", response_model=List[Customer])
async def get_customers(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """
    Get all customers with pagination, optionally filtered by name.
    """
    if search:
        return (await repo.search_by_name(search))[skip:skip + limit]
    return await repo.find_list(skip, limit)


@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: str,
    with_vehicles: bool = False,
    with_repairs: bool = False,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """
    Get a specific customer by ID, optionally with their vehicles and repairs.
    """
    relations = [name for name, wanted in (("vehicles", with_vehicles), ("repairs", with_repairs)) if wanted]
    customer = await repo.find_with_relations(customer_id, relations)
    if not customer:
        raise not_found("Customer")
    return customer


@router.post("/", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """
    Create a new customer. Duplicate emails are rejected by the store.
    """
    return await repo.save(customer)


@router.put("/{customer_id}", response_model=Customer)
async def update_customer(
    customer_id: str,
    customer_update: CustomerUpdate,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """
    Update a customer. Only provided fields change.
    """
    customer = await repo.update(customer_id, customer_update)
    if not customer:
        raise not_found("Customer")
    return customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    repo: CustomerRepository = Depends(get_customer_repository),
):
    """
    Delete a customer.
    """
    if not await repo.delete(customer_id):
        raise not_found("Customer")
    return None
