"""Booking service — preview and create priced bookings.

Rules:
- Customer and rate card must exist; room count and dates are validated by
  the pricing calculator.
- A booking is written once, with its price and invoice number in the same
  insert, and never updated.
- Invoice number collisions are retried with a fresh number; running out of
  attempts is an IntegrityError.
"""

from __future__ import annotations

from datetime import date
from typing import Callable

from travelly.domain.errors import (
    CustomerNotFoundError,
    IntegrityError,
    InvoiceNumberConflict,
    RateCardNotFoundError,
)
from travelly.domain.invoices import generate_invoice_number
from travelly.domain.models import (
    Booking,
    BookingSummary,
    Customer,
    NewBooking,
    RateCard,
)
from travelly.domain.pricing import PriceBreakdown, price
from travelly.infra.storage import Storage
from travelly.infra.time import Clock, utc_now
from travelly.observability.logging import get_logger
from travelly.observability.redaction import safe_log_context

logger = get_logger(__name__)

MAX_INVOICE_ATTEMPTS = 5


class BookingService:
    def __init__(
        self,
        storage: Storage,
        *,
        invoice_numbers: Callable[[], str] = generate_invoice_number,
        clock: Clock = utc_now,
    ) -> None:
        self._storage = storage
        self._invoice_numbers = invoice_numbers
        self._clock = clock

    def _resolve_and_price(
        self,
        customer_id: str,
        hotel_id: str,
        check_in: date,
        check_out: date,
        room_count: int,
    ) -> tuple[Customer, RateCard, PriceBreakdown]:
        customer = self._storage.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)

        rate_card = self._storage.get_rate_card(hotel_id)
        if rate_card is None:
            raise RateCardNotFoundError(hotel_id)

        breakdown = price(rate_card, check_in, check_out, room_count)
        return customer, rate_card, breakdown

    def preview_booking(
        self,
        customer_id: str,
        hotel_id: str,
        check_in: date,
        check_out: date,
        room_count: int,
    ) -> BookingSummary:
        """Price a booking without writing anything.

        Raises:
            CustomerNotFoundError, RateCardNotFoundError,
            InvalidRoomCountError, InvalidDateRangeError.
        """
        customer, rate_card, breakdown = self._resolve_and_price(
            customer_id, hotel_id, check_in, check_out, room_count
        )
        return BookingSummary(
            customer=customer,
            hotel=rate_card,
            check_in_date=check_in,
            check_out_date=check_out,
            room_count=room_count,
            nights=breakdown.nights,
            base_price_per_night=breakdown.base_price_per_night,
            selling_price_per_night=breakdown.selling_price_per_night,
            total_base_cost=breakdown.total_base_cost,
            total_selling_price=breakdown.total_selling_price,
        )

    def create_booking(
        self,
        customer_id: str,
        hotel_id: str,
        check_in: date,
        check_out: date,
        room_count: int,
    ) -> Booking:
        """Create and persist a priced booking with a fresh invoice number.

        Raises:
            CustomerNotFoundError, RateCardNotFoundError,
            InvalidRoomCountError, InvalidDateRangeError.
            IntegrityError: no unique invoice number after MAX_INVOICE_ATTEMPTS.
        """
        _, _, breakdown = self._resolve_and_price(
            customer_id, hotel_id, check_in, check_out, room_count
        )
        created_at = self._clock()

        for attempt in range(1, MAX_INVOICE_ATTEMPTS + 1):
            record = NewBooking(
                customer_id=customer_id,
                hotel_id=hotel_id,
                check_in_date=check_in,
                check_out_date=check_out,
                room_count=room_count,
                total_price=breakdown.total_selling_price,
                invoice_number=self._invoice_numbers(),
                created_at=created_at,
            )
            try:
                booking = self._storage.insert_booking(record)
            except InvoiceNumberConflict:
                logger.warning(
                    "invoice number collision, retrying",
                    extra={
                        "extra_fields": safe_log_context(
                            invoice_number=record.invoice_number,
                            attempt=attempt,
                        )
                    },
                )
                continue

            logger.info(
                "booking created",
                extra={
                    "extra_fields": safe_log_context(
                        booking_id=booking.id,
                        invoice_number=booking.invoice_number,
                        hotel_id=hotel_id,
                        nights=breakdown.nights,
                        room_count=room_count,
                        total_price=str(booking.total_price),
                    )
                },
            )
            return booking

        raise IntegrityError(
            f"Could not allocate a unique invoice number after {MAX_INVOICE_ATTEMPTS} attempts"
        )

    def list_bookings(self) -> list[Booking]:
        return self._storage.list_bookings()
