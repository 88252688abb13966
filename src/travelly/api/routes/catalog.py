"""Catalog delete endpoints, guarded against referenced rows.

Creating and editing customers and hotels is handled elsewhere; deletes
live here because they must check the booking ledger first.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Response

from travelly.api.deps import get_payment_ledger
from travelly.services.ledger_service import PaymentLedger

router = APIRouter(tags=["catalog"])


@router.delete("/customers/{customer_id}", status_code=204)
def delete_customer(
    customer_id: str = Path(..., description="Customer id"),
    ledger: PaymentLedger = Depends(get_payment_ledger),
) -> Response:
    """Delete a customer. 409 if any booking references it."""
    ledger.delete_customer(customer_id)
    return Response(status_code=204)


@router.delete("/hotels/{hotel_id}", status_code=204)
def delete_hotel(
    hotel_id: str = Path(..., description="Hotel (rate card) id"),
    ledger: PaymentLedger = Depends(get_payment_ledger),
) -> Response:
    """Delete a hotel rate card. 409 if any booking references it."""
    ledger.delete_rate_card(hotel_id)
    return Response(status_code=204)
