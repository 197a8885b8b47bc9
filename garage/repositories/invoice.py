"""
Invoice repository.

Totals are recomputed from the line items on every write that touches the
items or the tax rate. The amount paid is never stored: it is the sum of
the payments recorded against the invoice.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Union

from garage.exceptions import EntityValidationError
from garage.repositories.base import BaseRepository, Payload
from garage.repositories.payment import PaymentRepository
from garage.schemas.invoice import (
    STATUS_TRANSITIONS, Invoice, InvoiceBalance, InvoiceCreate, InvoiceStatus, InvoiceUpdate, compute_totals,
)
from garage.schemas.payment import Payment, PaymentCreate, PaymentRequest

logger = logging.getLogger(__name__)

UNPAID_STATUSES = (InvoiceStatus.SENT, InvoiceStatus.OVERDUE)


class InvoiceRepository(BaseRepository[Invoice]):
    table = "invoices"
    entity_schema = Invoice
    create_schema = InvoiceCreate
    update_schema = InvoiceUpdate

    def __init__(self, manager, default_tax_rate: float = 20.0):
        super().__init__(manager)
        self.default_tax_rate = default_tax_rate
        self.payments = PaymentRepository(manager)

    async def generate_number(self, year: Optional[int] = None) -> str:
        """Next ``YYYY-NNNN`` number of the year."""
        year = year or datetime.now(timezone.utc).year
        prefix = f"{year}-"
        sequence = 0
        for invoice in await self.manager.find_all(self.table):
            number = invoice.get("number") or ""
            if number.startswith(prefix) and number[len(prefix):].isdigit():
                sequence = max(sequence, int(number[len(prefix):]))
        return f"{prefix}{sequence + 1:04d}"

    async def _prepare_create(self, payload):
        if not payload.get("number"):
            payload["number"] = await self.generate_number()
        if payload.get("tax_rate") is None:
            payload["tax_rate"] = self.default_tax_rate
        payload["status"] = InvoiceStatus.DRAFT.value
        payload.update(compute_totals(payload.get("items", []), payload["tax_rate"]))
        return payload

    async def _prepare_update(self, entity_id, changes):
        if "items" not in changes and "tax_rate" not in changes:
            return changes
        current = await self.manager.find_by_id(self.table, entity_id)
        if current is None:
            return changes
        if changes.get("tax_rate") is None:
            changes["tax_rate"] = current.get("tax_rate", self.default_tax_rate)
        items = changes.get("items", current.get("items", []))
        changes.update(compute_totals(items, changes["tax_rate"]))
        return changes

    async def find_by_customer(self, customer_id: str) -> List[Invoice]:
        return await self.find_by({"customer_id": customer_id})

    async def find_by_status(self, status: Union[str, InvoiceStatus]) -> List[Invoice]:
        return await self.find_by({"status": InvoiceStatus(status)})

    async def find_unpaid(self) -> List[Invoice]:
        query = (
            self.create_query_builder()
            .where("status", "IN", [status.value for status in UNPAID_STATUSES])
            .order_by("due_date")
        )
        return await self.execute(query)

    async def transition(self, invoice_id: str, status: Union[str, InvoiceStatus], **extra) -> Optional[Invoice]:
        """
        Move an invoice along its status machine.

        Raises EntityValidationError for a change the machine does not allow.
        """
        invoice = await self.find_by_id(invoice_id)
        if invoice is None:
            return None

        status = InvoiceStatus(status)
        if status == invoice.status:
            return invoice
        if status not in STATUS_TRANSITIONS[invoice.status]:
            raise EntityValidationError(
                [f"An invoice cannot go from {invoice.status.value} to {status.value}"]
            )

        changes = {"status": status.value, **extra}
        if status == InvoiceStatus.PAID and "payment_date" not in changes:
            changes["payment_date"] = datetime.now(timezone.utc)
        logger.info("Invoice %s: %s -> %s", invoice.number, invoice.status.value, status.value)
        doc = await self.manager.update(self.table, invoice_id, changes)
        return self._to_entity(doc)

    async def paid_amount(self, invoice_id: str) -> float:
        return await self.payments.total_for_invoice(invoice_id)

    async def balance(self, invoice_id: str) -> Optional[InvoiceBalance]:
        invoice = await self.find_by_id(invoice_id)
        if invoice is None:
            return None
        paid = await self.paid_amount(invoice_id)
        return InvoiceBalance(
            invoice_id=invoice.id,
            total=invoice.total,
            paid_amount=paid,
            balance=round(invoice.total - paid, 2),
            status=invoice.status,
        )

    async def record_payment(self, invoice_id: str, data: Payload) -> Optional[Payment]:
        """
        Record a payment against a sent or overdue invoice.

        The invoice is marked paid once the payments cover its total.
        """
        invoice = await self.find_by_id(invoice_id)
        if invoice is None:
            return None
        if invoice.status not in UNPAID_STATUSES:
            raise EntityValidationError(
                [f"Payments cannot be recorded on a {invoice.status.value} invoice"]
            )

        request = self._parse(PaymentRequest, data)
        balance = round(invoice.total - await self.paid_amount(invoice_id), 2)
        if request.amount > balance:
            raise EntityValidationError([f"The payment exceeds the balance of {balance:.2f}"])

        payment = await self.payments.save(
            PaymentCreate(**request.model_dump(), invoice_id=invoice.id, customer_id=invoice.customer_id)
        )
        if request.amount >= balance:
            await self.transition(
                invoice_id,
                InvoiceStatus.PAID,
                payment_method=payment.method.value,
                payment_date=payment.date,
            )
        return payment

    async def mark_overdue(self, today: Optional[date] = None) -> List[Invoice]:
        """Flag sent invoices whose due date has passed. Returns the invoices changed."""
        today = today or datetime.now(timezone.utc).date()
        changed = []
        for invoice in await self.find_by_status(InvoiceStatus.SENT):
            if invoice.due_date.date() < today:
                changed.append(await self.transition(invoice.id, InvoiceStatus.OVERDUE))
        return changed
