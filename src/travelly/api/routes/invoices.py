"""Invoice endpoints: invoice detail lookup and payment recording."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel, ConfigDict, Field

from travelly.api.deps import get_payment_ledger
from travelly.domain.models import InvoiceDetail, Payment, PaymentMethod
from travelly.services.ledger_service import PaymentLedger

router = APIRouter(tags=["invoices"])


class RecordPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(..., description="Amount, two decimal places")
    payment_method: PaymentMethod


@router.get("/invoices/{invoice_number}")
def get_invoice_detail(
    invoice_number: str = Path(..., description="Invoice number"),
    ledger: PaymentLedger = Depends(get_payment_ledger),
) -> InvoiceDetail:
    """Get a booking's invoice with payments, total paid and outstanding balance."""
    detail = ledger.get_invoice_detail(invoice_number)
    if detail is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return detail


@router.post("/bookings/{booking_id}/payments", status_code=201)
def record_payment(
    body: RecordPaymentRequest,
    booking_id: str = Path(..., description="Booking id"),
    ledger: PaymentLedger = Depends(get_payment_ledger),
) -> Payment:
    """Record a payment against a booking's invoice.

    Rejected with 422 when the amount exceeds the outstanding balance.
    """
    return ledger.record_payment(booking_id, body.amount, body.payment_method)
