"""Error taxonomy for the booking engine.

Families:
- NotFoundError: customer, rate card or booking missing (404).
- ValidationError: bad input or a rejected write (422).
- ReferentialConflictError: delete blocked by existing bookings (409).
- StorageUnavailableError: transient storage failure, caller may retry (503).
- IntegrityError: internal invariant broken, fatal for the request (500).
"""

from __future__ import annotations

from decimal import Decimal


class TravellyError(Exception):
    """Base class for every error raised by the engine."""

    code = "error"


# ── Not found ────────────────────────────────────────────


class NotFoundError(TravellyError):
    code = "not_found"


class CustomerNotFoundError(NotFoundError):
    code = "customer_not_found"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer with id {customer_id} not found")


class RateCardNotFoundError(NotFoundError):
    code = "hotel_not_found"

    def __init__(self, hotel_id: str):
        self.hotel_id = hotel_id
        super().__init__(f"Hotel with id {hotel_id} not found")


class BookingNotFoundError(NotFoundError):
    code = "booking_not_found"

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking with id {booking_id} not found")


# ── Validation ───────────────────────────────────────────


class ValidationError(TravellyError):
    code = "validation_error"


class InvalidDateRangeError(ValidationError):
    code = "invalid_date_range"

    def __init__(self, message: str = "Check-out date must be after check-in date"):
        super().__init__(message)


class InvalidRoomCountError(ValidationError):
    code = "invalid_room_count"

    def __init__(self, room_count: int):
        self.room_count = room_count
        super().__init__(f"Room count must be positive, got {room_count}")


class InvalidAmountError(ValidationError):
    code = "invalid_amount"

    def __init__(self, amount: Decimal, reason: str = "must be positive"):
        self.amount = amount
        super().__init__(f"Payment amount {amount} {reason}")


class OverpaymentRejectedError(ValidationError):
    """Payment would push the total paid above the booking price."""

    code = "overpayment_rejected"

    def __init__(self, amount: Decimal, outstanding: Decimal):
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            f"Payment of {amount} exceeds outstanding balance of {outstanding}"
        )


class InvalidReportFilterError(ValidationError):
    code = "invalid_report_filter"


# ── Conflicts / infrastructure ───────────────────────────


class ReferentialConflictError(TravellyError):
    code = "referential_conflict"


class CustomerInUseError(ReferentialConflictError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__("Cannot delete customer with existing bookings")


class RateCardInUseError(ReferentialConflictError):
    def __init__(self, hotel_id: str):
        self.hotel_id = hotel_id
        super().__init__("Cannot delete hotel: there are existing bookings for this hotel")


class StorageUnavailableError(TravellyError):
    code = "storage_unavailable"


class IntegrityError(TravellyError):
    code = "integrity_error"


class InvoiceNumberConflict(Exception):
    """Raised by storage when an invoice number is already taken.

    Not a TravellyError: the booking factory handles it by regenerating
    the number and never lets it reach callers.
    """

    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice number {invoice_number} already exists")
