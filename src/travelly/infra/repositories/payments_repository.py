"""Payments repository - persistence for invoice payment records.

Uses raw SQL with psycopg2 (no ORM). Payments are append-only: there is no
update or delete here.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from psycopg2.extensions import cursor as PgCursor

_COLUMNS = (
    "id, booking_id, invoice_number, amount, "
    "payment_method, payment_date, created_at"
)


def _row_to_dict(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "booking_id": str(row[1]),
        "invoice_number": row[2],
        "amount": row[3],
        "payment_method": row[4],
        "payment_date": row[5],
        "created_at": row[6],
    }


def insert_payment(
    cur: PgCursor,
    *,
    booking_id: str,
    invoice_number: str,
    amount: Decimal,
    payment_method: str,
    payment_date: datetime,
    created_at: datetime,
) -> dict[str, Any]:
    """Insert a payment against a booking's invoice.

    Args:
        cur: Database cursor.
        booking_id: Booking UUID.
        invoice_number: Invoice number copied from the booking.
        amount: Amount (must be > 0, two decimal places).
        payment_method: cash, card, bank_transfer or online.
        payment_date: When the payment was received.
        created_at: When the record was written.

    Returns:
        Dict with the created payment fields.
    """
    cur.execute(
        f"""
        INSERT INTO payments (
            booking_id, invoice_number, amount,
            payment_method, payment_date, created_at
        )
        VALUES (%s, %s, %s, %s, %s, %s)
        RETURNING {_COLUMNS}
        """,
        (booking_id, invoice_number, amount, payment_method, payment_date, created_at),
    )
    return _row_to_dict(cur.fetchone())


def list_payments_for_booking(
    cur: PgCursor,
    *,
    booking_id: str,
) -> list[dict[str, Any]]:
    """List payments for a booking, oldest first."""
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM payments
        WHERE booking_id = %s
        ORDER BY created_at, id
        """,
        (booking_id,),
    )
    return [_row_to_dict(r) for r in cur.fetchall()]
