"""Booking endpoints — preview, create and list bookings."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from travelly.api.deps import get_booking_service
from travelly.domain.models import Booking, BookingSummary
from travelly.observability.correlation import get_correlation_id
from travelly.observability.logging import get_logger
from travelly.observability.redaction import safe_log_context
from travelly.services.booking_service import BookingService

router = APIRouter(prefix="/bookings", tags=["bookings"])

logger = get_logger(__name__)


# ── Request schemas ──────────────────────────────────────


class BookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    customer_id: str
    hotel_id: str
    check_in_date: date
    check_out_date: date
    room_count: int


# ── Endpoints ────────────────────────────────────────────


@router.post("/preview")
def preview_booking(
    body: BookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> BookingSummary:
    """Price a booking without creating it (preview-then-confirm flow)."""
    return service.preview_booking(
        body.customer_id,
        body.hotel_id,
        body.check_in_date,
        body.check_out_date,
        body.room_count,
    )


@router.post("", status_code=201)
def create_booking(
    body: BookingRequest,
    service: BookingService = Depends(get_booking_service),
) -> Booking:
    """Create a booking with its total price and invoice number."""
    booking = service.create_booking(
        body.customer_id,
        body.hotel_id,
        body.check_in_date,
        body.check_out_date,
        body.room_count,
    )

    logger.info(
        "booking endpoint completed",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                booking_id=booking.id,
                invoice_number=booking.invoice_number,
            )
        },
    )
    return booking


@router.get("")
def list_bookings(
    service: BookingService = Depends(get_booking_service),
) -> list[Booking]:
    """List all bookings, oldest first."""
    return service.list_bookings()
