"""Customers repository - customer reads and guarded deletes.

Uses raw SQL with psycopg2 (no ORM). Creating and editing customers is done
by the catalog layer; the booking engine only reads them, and deletes them
after checking no booking references the row.
"""

from typing import Any

from psycopg2.extensions import cursor as PgCursor

_COLUMNS = "id, name, address, phone, email, created_at"


def _row_to_dict(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "address": row[2],
        "phone": row[3],
        "email": row[4],
        "created_at": row[5],
    }


def get_customer(cur: PgCursor, *, customer_id: str) -> dict[str, Any] | None:
    """Fetch a customer by id, or None."""
    cur.execute(
        f"SELECT {_COLUMNS} FROM customers WHERE id = %s",
        (customer_id,),
    )
    row = cur.fetchone()
    return _row_to_dict(row) if row else None


def insert_customer(
    cur: PgCursor,
    *,
    name: str,
    address: str,
    phone: str,
    email: str,
) -> dict[str, Any]:
    """Insert a customer. Used by seeding and integration tests."""
    cur.execute(
        f"""
        INSERT INTO customers (name, address, phone, email)
        VALUES (%s, %s, %s, %s)
        RETURNING {_COLUMNS}
        """,
        (name, address, phone, email),
    )
    return _row_to_dict(cur.fetchone())


def delete_customer(cur: PgCursor, *, customer_id: str) -> bool:
    """Delete a customer.

    Returns:
        True if a row was deleted, False if not found.
    """
    cur.execute("DELETE FROM customers WHERE id = %s", (customer_id,))
    return cur.rowcount > 0
