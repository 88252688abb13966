"""Bookings repository - persistence for booking records.

Uses raw SQL with psycopg2 (no ORM). Bookings are insert-only; price and
invoice number are written by the same INSERT.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from travelly.infra.db import lock_row

_COLUMNS = (
    "id, customer_id, hotel_id, check_in_date, check_out_date, "
    "room_count, total_price, invoice_number, created_at"
)


def _row_to_dict(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "customer_id": str(row[1]),
        "hotel_id": str(row[2]),
        "check_in_date": row[3],
        "check_out_date": row[4],
        "room_count": row[5],
        "total_price": row[6],
        "invoice_number": row[7],
        "created_at": row[8],
    }


def insert_booking(
    cur: PgCursor,
    *,
    customer_id: str,
    hotel_id: str,
    check_in_date: date,
    check_out_date: date,
    room_count: int,
    total_price: Decimal,
    invoice_number: str,
    created_at: datetime,
) -> dict[str, Any] | None:
    """Insert a booking, idempotent on invoice_number.

    Uses ON CONFLICT DO NOTHING so a duplicate invoice number does not abort
    the transaction.

    Returns:
        Dict with the created booking, or None if invoice_number already exists.
    """
    cur.execute(
        f"""
        INSERT INTO bookings (
            customer_id, hotel_id, check_in_date, check_out_date,
            room_count, total_price, invoice_number, created_at
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT (invoice_number) DO NOTHING
        RETURNING {_COLUMNS}
        """,
        (
            customer_id,
            hotel_id,
            check_in_date,
            check_out_date,
            room_count,
            total_price,
            invoice_number,
            created_at,
        ),
    )
    row = cur.fetchone()
    return _row_to_dict(row) if row else None


def get_booking(cur: PgCursor, *, booking_id: str) -> dict[str, Any] | None:
    cur.execute(f"SELECT {_COLUMNS} FROM bookings WHERE id = %s", (booking_id,))
    row = cur.fetchone()
    return _row_to_dict(row) if row else None


def lock_booking(cur: PgCursor, *, booking_id: str) -> dict[str, Any] | None:
    """Fetch a booking with SELECT ... FOR UPDATE (caller holds the transaction)."""
    row = lock_row(
        cur,
        f"SELECT {_COLUMNS} FROM bookings WHERE id = %s",
        (booking_id,),
    )
    return _row_to_dict(row) if row else None


def get_booking_by_invoice_number(
    cur: PgCursor,
    *,
    invoice_number: str,
) -> dict[str, Any] | None:
    cur.execute(
        f"SELECT {_COLUMNS} FROM bookings WHERE invoice_number = %s",
        (invoice_number,),
    )
    row = cur.fetchone()
    return _row_to_dict(row) if row else None


def list_bookings(cur: PgCursor) -> list[dict[str, Any]]:
    """List all bookings, oldest first."""
    cur.execute(f"SELECT {_COLUMNS} FROM bookings ORDER BY created_at, id")
    return [_row_to_dict(r) for r in cur.fetchall()]


def has_bookings_for_customer(cur: PgCursor, *, customer_id: str) -> bool:
    cur.execute(
        "SELECT EXISTS (SELECT 1 FROM bookings WHERE customer_id = %s)",
        (customer_id,),
    )
    return bool(cur.fetchone()[0])


def has_bookings_for_hotel(cur: PgCursor, *, hotel_id: str) -> bool:
    cur.execute(
        "SELECT EXISTS (SELECT 1 FROM bookings WHERE hotel_id = %s)",
        (hotel_id,),
    )
    return bool(cur.fetchone()[0])
