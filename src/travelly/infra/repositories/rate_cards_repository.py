"""Rate cards repository - persistence for hotel rate cards.

Uses raw SQL with psycopg2 (no ORM). The table keeps the "hotels" name used
by the back office; each row is one priceable rate card.
"""

from decimal import Decimal
from typing import Any

from psycopg2.extensions import cursor as PgCursor

_COLUMNS = (
    "id, name, location, room_type, meal_package, "
    "base_price, markup_percentage, created_at"
)


def _row_to_dict(row: tuple) -> dict[str, Any]:
    return {
        "id": str(row[0]),
        "name": row[1],
        "location": row[2],
        "room_type": row[3],
        "meal_package": row[4],
        "base_price": row[5],
        "markup_percentage": row[6],
        "created_at": row[7],
    }


def get_rate_card(cur: PgCursor, *, hotel_id: str) -> dict[str, Any] | None:
    """Fetch a rate card by hotel id, or None."""
    cur.execute(f"SELECT {_COLUMNS} FROM hotels WHERE id = %s", (hotel_id,))
    row = cur.fetchone()
    return _row_to_dict(row) if row else None


def insert_rate_card(
    cur: PgCursor,
    *,
    name: str,
    location: str,
    room_type: str,
    meal_package: str,
    base_price: Decimal,
    markup_percentage: Decimal,
) -> dict[str, Any]:
    """Insert a rate card. Used by seeding and integration tests."""
    cur.execute(
        f"""
        INSERT INTO hotels (
            name, location, room_type, meal_package,
            base_price, markup_percentage
        )
        VALUES (%s, %s, %s, %s, %s, %s)
        RETURNING {_COLUMNS}
        """,
        (name, location, room_type, meal_package, base_price, markup_percentage),
    )
    return _row_to_dict(cur.fetchone())


def delete_rate_card(cur: PgCursor, *, hotel_id: str) -> bool:
    """Delete a rate card.

    Returns:
        True if a row was deleted, False if not found.
    """
    cur.execute("DELETE FROM hotels WHERE id = %s", (hotel_id,))
    return cur.rowcount > 0
