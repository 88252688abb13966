"""Storage collaborator contract and the in-memory implementation.

The engine only talks to storage through the Storage protocol, so services
can run against InMemoryStorage (tests, local dev) or PostgresStorage.

locked_booking() is the per-invoice write serialization point: everything
done on the yielded view happens while no other caller holds the same
booking. InMemoryStorage uses one lock per booking; PostgresStorage uses
SELECT ... FOR UPDATE inside a transaction.

References are enforced by the storage itself: a booking cannot be inserted
for a customer or rate card that is gone, and a referenced customer or rate
card cannot be deleted. InMemoryStorage does both checks under its store
lock; Postgres relies on the ON DELETE RESTRICT foreign keys.
"""

from __future__ import annotations

import threading
import uuid
from contextlib import contextmanager
from typing import Iterator, Protocol

from travelly.domain.errors import (
    BookingNotFoundError,
    CustomerInUseError,
    CustomerNotFoundError,
    InvoiceNumberConflict,
    RateCardInUseError,
    RateCardNotFoundError,
)
from travelly.domain.models import (
    Booking,
    Customer,
    NewBooking,
    NewPayment,
    Payment,
    RateCard,
)


class Storage(Protocol):
    def get_customer(self, customer_id: str) -> Customer | None: ...

    def get_rate_card(self, hotel_id: str) -> RateCard | None: ...

    def insert_booking(self, record: NewBooking) -> Booking:
        """Insert a booking.

        Raises:
            InvoiceNumberConflict: invoice_number is already taken.
            CustomerNotFoundError, RateCardNotFoundError: a referenced row
                no longer exists.
        """
        ...

    def list_bookings(self) -> list[Booking]: ...

    def get_booking(self, booking_id: str) -> Booking | None: ...

    def get_booking_by_invoice_number(self, invoice_number: str) -> Booking | None: ...

    def insert_payment(self, record: NewPayment) -> Payment: ...

    def list_payments_for_booking(self, booking_id: str) -> list[Payment]: ...

    def has_bookings_for_customer(self, customer_id: str) -> bool: ...

    def has_bookings_for_rate_card(self, hotel_id: str) -> bool: ...

    def delete_customer(self, customer_id: str) -> bool:
        """Delete a customer; False if it does not exist.

        Raises:
            CustomerInUseError: a booking references the customer.
        """
        ...

    def delete_rate_card(self, hotel_id: str) -> bool:
        """Delete a rate card; False if it does not exist.

        Raises:
            RateCardInUseError: a booking references the rate card.
        """
        ...

    def locked_booking(self, booking_id: str) -> Iterator["Storage"]:
        """Context manager: hold the booking exclusively for a read-check-write.

        Raises:
            BookingNotFoundError: booking does not exist.
        """
        ...


class InMemoryStorage:
    """Dict-backed storage. Thread-safe; one lock per booking for payments."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._customers: dict[str, Customer] = {}
        self._rate_cards: dict[str, RateCard] = {}
        self._bookings: dict[str, Booking] = {}
        self._bookings_by_invoice: dict[str, str] = {}
        self._payments: dict[str, list[Payment]] = {}
        self._booking_locks: dict[str, threading.Lock] = {}

    # ── Seeding (catalog CRUD lives outside the engine) ──

    def add_customer(self, customer: Customer) -> Customer:
        with self._lock:
            self._customers[customer.id] = customer
        return customer

    def add_rate_card(self, rate_card: RateCard) -> RateCard:
        with self._lock:
            self._rate_cards[rate_card.id] = rate_card
        return rate_card

    # ── Reads ───────────────────────────────────────────

    def get_customer(self, customer_id: str) -> Customer | None:
        return self._customers.get(customer_id)

    def get_rate_card(self, hotel_id: str) -> RateCard | None:
        return self._rate_cards.get(hotel_id)

    def list_bookings(self) -> list[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        return sorted(bookings, key=lambda b: (b.created_at, b.id))

    def get_booking(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def get_booking_by_invoice_number(self, invoice_number: str) -> Booking | None:
        with self._lock:
            booking_id = self._bookings_by_invoice.get(invoice_number)
            return self._bookings.get(booking_id) if booking_id else None

    def list_payments_for_booking(self, booking_id: str) -> list[Payment]:
        with self._lock:
            return list(self._payments.get(booking_id, ()))

    def has_bookings_for_customer(self, customer_id: str) -> bool:
        with self._lock:
            return any(b.customer_id == customer_id for b in self._bookings.values())

    def has_bookings_for_rate_card(self, hotel_id: str) -> bool:
        with self._lock:
            return any(b.hotel_id == hotel_id for b in self._bookings.values())

    # ── Writes ──────────────────────────────────────────

    def insert_booking(self, record: NewBooking) -> Booking:
        with self._lock:
            if record.customer_id not in self._customers:
                raise CustomerNotFoundError(record.customer_id)
            if record.hotel_id not in self._rate_cards:
                raise RateCardNotFoundError(record.hotel_id)
            if record.invoice_number in self._bookings_by_invoice:
                raise InvoiceNumberConflict(record.invoice_number)
            booking = Booking(id=str(uuid.uuid4()), **record.model_dump())
            self._bookings[booking.id] = booking
            self._bookings_by_invoice[booking.invoice_number] = booking.id
            self._payments[booking.id] = []
            self._booking_locks[booking.id] = threading.Lock()
        return booking

    def insert_payment(self, record: NewPayment) -> Payment:
        payment = Payment(id=str(uuid.uuid4()), **record.model_dump())
        with self._lock:
            if record.booking_id not in self._bookings:
                raise BookingNotFoundError(record.booking_id)
            self._payments[record.booking_id].append(payment)
        return payment

    def delete_customer(self, customer_id: str) -> bool:
        with self._lock:
            if self.has_bookings_for_customer(customer_id):
                raise CustomerInUseError(customer_id)
            return self._customers.pop(customer_id, None) is not None

    def delete_rate_card(self, hotel_id: str) -> bool:
        with self._lock:
            if self.has_bookings_for_rate_card(hotel_id):
                raise RateCardInUseError(hotel_id)
            return self._rate_cards.pop(hotel_id, None) is not None

    @contextmanager
    def locked_booking(self, booking_id: str) -> Iterator["InMemoryStorage"]:
        with self._lock:
            booking_lock = self._booking_locks.get(booking_id)
        if booking_lock is None:
            raise BookingNotFoundError(booking_id)
        with booking_lock:
            yield self
