"""Postgres implementation of the Storage protocol.

Each call runs in its own short transaction (txn()), unless the storage is
bound to a cursor by locked_booking(): then every call shares the locking
transaction, which commits when the with-block exits.

Foreign key violations from the ON DELETE RESTRICT constraints are raised as
the engine's not-found and in-use errors.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Iterator

from psycopg2 import errors as pg_errors
from psycopg2.extensions import cursor as PgCursor

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
from travelly.infra.db import storage_errors, txn
from travelly.infra.repositories import (
    bookings_repository,
    customers_repository,
    payments_repository,
    rate_cards_repository,
)


def _is_uuid(value: str) -> bool:
    """Ids are UUID columns; anything else can never match a row."""
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class PostgresStorage:
    def __init__(self, cur: PgCursor | None = None) -> None:
        self._cur = cur

    @contextmanager
    def _cursor(self) -> Iterator[PgCursor]:
        if self._cur is not None:
            with storage_errors():
                yield self._cur
            return
        with storage_errors(), txn() as cur:
            yield cur

    # ── Reads ───────────────────────────────────────────

    def get_customer(self, customer_id: str) -> Customer | None:
        if not _is_uuid(customer_id):
            return None
        with self._cursor() as cur:
            row = customers_repository.get_customer(cur, customer_id=customer_id)
        return Customer(**row) if row else None

    def get_rate_card(self, hotel_id: str) -> RateCard | None:
        if not _is_uuid(hotel_id):
            return None
        with self._cursor() as cur:
            row = rate_cards_repository.get_rate_card(cur, hotel_id=hotel_id)
        return RateCard(**row) if row else None

    def list_bookings(self) -> list[Booking]:
        with self._cursor() as cur:
            rows = bookings_repository.list_bookings(cur)
        return [Booking(**r) for r in rows]

    def get_booking(self, booking_id: str) -> Booking | None:
        if not _is_uuid(booking_id):
            return None
        with self._cursor() as cur:
            row = bookings_repository.get_booking(cur, booking_id=booking_id)
        return Booking(**row) if row else None

    def get_booking_by_invoice_number(self, invoice_number: str) -> Booking | None:
        with self._cursor() as cur:
            row = bookings_repository.get_booking_by_invoice_number(
                cur, invoice_number=invoice_number
            )
        return Booking(**row) if row else None

    def list_payments_for_booking(self, booking_id: str) -> list[Payment]:
        if not _is_uuid(booking_id):
            return []
        with self._cursor() as cur:
            rows = payments_repository.list_payments_for_booking(cur, booking_id=booking_id)
        return [Payment(**r) for r in rows]

    def has_bookings_for_customer(self, customer_id: str) -> bool:
        if not _is_uuid(customer_id):
            return False
        with self._cursor() as cur:
            return bookings_repository.has_bookings_for_customer(cur, customer_id=customer_id)

    def has_bookings_for_rate_card(self, hotel_id: str) -> bool:
        if not _is_uuid(hotel_id):
            return False
        with self._cursor() as cur:
            return bookings_repository.has_bookings_for_hotel(cur, hotel_id=hotel_id)

    # ── Writes ──────────────────────────────────────────

    def insert_booking(self, record: NewBooking) -> Booking:
        with self._cursor() as cur:
            try:
                row = bookings_repository.insert_booking(cur, **record.model_dump())
            except pg_errors.ForeignKeyViolation as exc:
                if exc.diag.constraint_name == "bookings_hotel_id_fkey":
                    raise RateCardNotFoundError(record.hotel_id) from exc
                raise CustomerNotFoundError(record.customer_id) from exc
        if row is None:
            raise InvoiceNumberConflict(record.invoice_number)
        return Booking(**row)

    def insert_payment(self, record: NewPayment) -> Payment:
        values = record.model_dump()
        values["payment_method"] = record.payment_method.value
        with self._cursor() as cur:
            row = payments_repository.insert_payment(cur, **values)
        return Payment(**row)

    def delete_customer(self, customer_id: str) -> bool:
        if not _is_uuid(customer_id):
            return False
        with self._cursor() as cur:
            try:
                return customers_repository.delete_customer(cur, customer_id=customer_id)
            except pg_errors.ForeignKeyViolation as exc:
                raise CustomerInUseError(customer_id) from exc

    def delete_rate_card(self, hotel_id: str) -> bool:
        if not _is_uuid(hotel_id):
            return False
        with self._cursor() as cur:
            try:
                return rate_cards_repository.delete_rate_card(cur, hotel_id=hotel_id)
            except pg_errors.ForeignKeyViolation as exc:
                raise RateCardInUseError(hotel_id) from exc

    @contextmanager
    def locked_booking(self, booking_id: str) -> Iterator["PostgresStorage"]:
        if not _is_uuid(booking_id):
            raise BookingNotFoundError(booking_id)
        with storage_errors(), txn() as cur:
            row = bookings_repository.lock_booking(cur, booking_id=booking_id)
            if row is None:
                raise BookingNotFoundError(booking_id)
            yield PostgresStorage(cur)
