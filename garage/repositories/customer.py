"""
Customer repository.
"""
from typing import List, Optional

from garage.repositories.base import BaseRepository
from garage.schemas.customer import Customer, CustomerCreate, CustomerUpdate
from garage.schemas.repair import RepairStatus


class CustomerRepository(BaseRepository[Customer]):
    table = "customers"
    entity_schema = Customer
    create_schema = CustomerCreate
    update_schema = CustomerUpdate

    async def find_by_email(self, email: str) -> Optional[Customer]:
        return await self.find_one_by({"email": email})

    async def find_by_phone(self, phone: str) -> List[Customer]:
        return await self.find_by({"phone": phone})

    async def search_by_name(self, term: str) -> List[Customer]:
        """Customers whose first or last name contains ``term``, case-insensitively."""
        query = (
            self.create_query_builder()
            .or_where("first_name", "LIKE", term)
            .where("last_name", "LIKE", term)
            .order_by("last_name")
        )
        return await self.execute(query)

    async def find_with_vehicles(self, customer_id: str) -> Optional[Customer]:
        return await self.find_with_relations(customer_id, ["vehicles"])

    async def find_with_vehicles_and_repairs(self, customer_id: str) -> Optional[Customer]:
        return await self.find_with_relations(customer_id, ["vehicles", "repairs"])

    async def find_with_active_repairs(self) -> List[Customer]:
        """Customers that have at least one repair in progress."""
        repairs = await self.manager.find_by("repairs", {"status": RepairStatus.IN_PROGRESS.value})
        customer_ids = {repair["customer_id"] for repair in repairs}
        return [customer for customer in await self.find_all() if customer.id in customer_ids]
