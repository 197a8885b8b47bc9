"""
Invoice and payment routes.
"""
from datetime import date
from fastapi import APIRouter, Body, Depends, status
from typing import List, Optional

from garage.repositories import InvoiceRepository
from garage.routers.deps import get_invoice_repository, not_found
from garage.schemas.invoice import Invoice, InvoiceBalance, InvoiceCreate, InvoiceStatus, InvoiceUpdate
from garage.schemas.payment import Payment, PaymentRequest

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/", response_model=List[Invoice])
async def get_invoices(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[InvoiceStatus] = None,
    customer_id: Optional[str] = None,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Get all invoices with pagination and optional status or customer filter.
    """
    if status_filter:
        return (await repo.find_by_status(status_filter))[skip:skip + limit]
    if customer_id:
        return (await repo.find_by_customer(customer_id))[skip:skip + limit]
    return await repo.find_list(skip, limit)


@router.get("/unpaid", response_model=List[Invoice])
async def get_unpaid_invoices(repo: InvoiceRepository = Depends(get_invoice_repository)):
    """
    Sent and overdue invoices, earliest due first.
    """
    return await repo.find_unpaid()


@router.post("/overdue", response_model=List[Invoice])
async def flag_overdue_invoices(
    today: Optional[date] = None,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Mark sent invoices past their due date as overdue.
    """
    return await repo.mark_overdue(today)


@router.get("/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: str,
    with_payments: bool = False,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Get a specific invoice by ID.
    """
    invoice = await repo.find_with_relations(invoice_id, ["payments"] if with_payments else [])
    if not invoice:
        raise not_found("Invoice")
    return invoice


@router.post("/", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice: InvoiceCreate,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Create a draft invoice. The number and totals are computed.
    """
    return await repo.save(invoice)


@router.put("/{invoice_id}", response_model=Invoice)
async def update_invoice(
    invoice_id: str,
    invoice_update: InvoiceUpdate,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Update an invoice. Totals follow the items and tax rate.
    """
    invoice = await repo.update(invoice_id, invoice_update)
    if not invoice:
        raise not_found("Invoice")
    return invoice


@router.post("/{invoice_id}/status", response_model=Invoice)
async def change_invoice_status(
    invoice_id: str,
    new_status: InvoiceStatus = Body(..., embed=True, alias="status"),
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Move an invoice along draft, sent, paid, overdue and cancelled.
    """
    invoice = await repo.transition(invoice_id, new_status)
    if not invoice:
        raise not_found("Invoice")
    return invoice


@router.get("/{invoice_id}/balance", response_model=InvoiceBalance)
async def get_invoice_balance(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    balance = await repo.balance(invoice_id)
    if not balance:
        raise not_found("Invoice")
    return balance


@router.get("/{invoice_id}/payments", response_model=List[Payment])
async def get_invoice_payments(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    return await repo.payments.find_by_invoice(invoice_id)


@router.post("/{invoice_id}/payments", response_model=Payment, status_code=status.HTTP_201_CREATED)
async def record_invoice_payment(
    invoice_id: str,
    payment: PaymentRequest,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Record a payment. The invoice is marked paid once fully covered.
    """
    recorded = await repo.record_payment(invoice_id, payment)
    if not recorded:
        raise not_found("Invoice")
    return recorded


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: str,
    repo: InvoiceRepository = Depends(get_invoice_repository),
):
    """
    Delete an invoice.
    """
    if not await repo.delete(invoice_id):
        raise not_found("Invoice")
    return None
