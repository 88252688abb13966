"""Payment ledger — business logic for invoice payments and balances.

Rules:
- Payments are append-only and carry the booking's invoice number.
- The sum of a booking's payments never exceeds its total price. The check
  and the insert run inside storage.locked_booking(), so concurrent payments
  on the same invoice are serialized.
- Invoice detail is recomputed on every read.
- Customers and rate cards referenced by a booking cannot be deleted. The
  has-bookings check here gives the common answer; storage repeats it
  atomically with the delete, so a booking created in between still wins.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from travelly.domain.errors import (
    BookingNotFoundError,
    CustomerInUseError,
    CustomerNotFoundError,
    IntegrityError,
    InvalidAmountError,
    OverpaymentRejectedError,
    RateCardInUseError,
    RateCardNotFoundError,
    ValidationError,
)
from travelly.domain.ledger import outstanding_balance, total_paid
from travelly.domain.models import InvoiceDetail, NewPayment, Payment, PaymentMethod
from travelly.domain.pricing import CENT
from travelly.infra.storage import Storage
from travelly.infra.time import Clock, utc_now
from travelly.observability.logging import get_logger
from travelly.observability.redaction import safe_log_context

logger = get_logger(__name__)


def _validate_amount(amount: Decimal | int | str) -> Decimal:
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise InvalidAmountError(amount, "is not a number")
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(value)
    cents = value.quantize(CENT)
    if value != cents:
        raise InvalidAmountError(value, "has more than two decimal places")
    return cents


class PaymentLedger:
    def __init__(self, storage: Storage, *, clock: Clock = utc_now) -> None:
        self._storage = storage
        self._clock = clock

    def record_payment(
        self,
        booking_id: str,
        amount: Decimal,
        method: PaymentMethod,
    ) -> Payment:
        """Record a payment against a booking's invoice.

        Raises:
            BookingNotFoundError: Booking does not exist.
            InvalidAmountError: Amount is not positive or has sub-cent precision.
            OverpaymentRejectedError: Amount exceeds the outstanding balance.
        """
        if self._storage.get_booking(booking_id) is None:
            raise BookingNotFoundError(booking_id)
        value = _validate_amount(amount)
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise ValidationError(f"Unknown payment method {method!r}")

        with self._storage.locked_booking(booking_id) as locked:
            booking = locked.get_booking(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)

            paid = total_paid(locked.list_payments_for_booking(booking_id))
            outstanding = outstanding_balance(booking.total_price, paid)
            if value > outstanding:
                logger.warning(
                    "payment rejected: overpayment",
                    extra={
                        "extra_fields": safe_log_context(
                            booking_id=booking_id,
                            invoice_number=booking.invoice_number,
                            amount=str(value),
                            outstanding=str(outstanding),
                        )
                    },
                )
                raise OverpaymentRejectedError(value, outstanding)

            now = self._clock()
            payment = locked.insert_payment(
                NewPayment(
                    booking_id=booking_id,
                    invoice_number=booking.invoice_number,
                    amount=value,
                    payment_method=method,
                    payment_date=now,
                    created_at=now,
                )
            )

        logger.info(
            "payment recorded",
            extra={
                "extra_fields": safe_log_context(
                    booking_id=booking_id,
                    invoice_number=payment.invoice_number,
                    payment_id=payment.id,
                    amount=str(value),
                    method=method.value,
                )
            },
        )
        return payment

    def get_invoice_detail(self, invoice_number: str) -> InvoiceDetail | None:
        """Return the invoice with its payments and balance, or None if unknown."""
        booking = self._storage.get_booking_by_invoice_number(invoice_number)
        if booking is None:
            return None

        customer = self._storage.get_customer(booking.customer_id)
        rate_card = self._storage.get_rate_card(booking.hotel_id)
        if customer is None or rate_card is None:
            raise IntegrityError(
                f"Invoice {invoice_number} references a missing customer or hotel"
            )

        payments = self._storage.list_payments_for_booking(booking.id)
        paid = total_paid(payments)
        return InvoiceDetail(
            booking=booking,
            customer=customer,
            hotel=rate_card,
            payments=payments,
            total_paid=paid,
            outstanding_balance=outstanding_balance(booking.total_price, paid),
        )

    # ── Deletion guard ───────────────────────────────────

    def delete_customer(self, customer_id: str) -> None:
        """Delete a customer with no bookings.

        Raises:
            CustomerInUseError: Customer has bookings.
            CustomerNotFoundError: Customer does not exist.
        """
        if self._storage.has_bookings_for_customer(customer_id):
            raise CustomerInUseError(customer_id)
        if not self._storage.delete_customer(customer_id):
            raise CustomerNotFoundError(customer_id)
        logger.info(
            "customer deleted",
            extra={"extra_fields": safe_log_context(customer_id=customer_id)},
        )

    def delete_rate_card(self, hotel_id: str) -> None:
        """Delete a rate card with no bookings.

        Raises:
            RateCardInUseError: Rate card has bookings.
            RateCardNotFoundError: Rate card does not exist.
        """
        if self._storage.has_bookings_for_rate_card(hotel_id):
            raise RateCardInUseError(hotel_id)
        if not self._storage.delete_rate_card(hotel_id):
            raise RateCardNotFoundError(hotel_id)
        logger.info(
            "hotel deleted",
            extra={"extra_fields": safe_log_context(hotel_id=hotel_id)},
        )
