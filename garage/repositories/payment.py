"""
Payment repository.
"""
from typing import List

from garage.repositories.base import BaseRepository
from garage.schemas.payment import Payment, PaymentCreate, PaymentUpdate


class PaymentRepository(BaseRepository[Payment]):
    table = "payments"
    entity_schema = Payment
    create_schema = PaymentCreate
    update_schema = PaymentUpdate

    async def find_by_invoice(self, invoice_id: str) -> List[Payment]:
        query = self.create_query_builder().where("invoice_id", "=", invoice_id).order_by("date")
        return await self.execute(query)

    async def total_for_invoice(self, invoice_id: str) -> float:
        return round(sum(payment.amount for payment in await self.find_by_invoice(invoice_id)), 2)
