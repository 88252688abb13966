"""Load demo customers and hotel rate cards into Postgres.

Usage:
    DATABASE_URL=... python -m travelly.operations.seed_demo

Idempotent per name: rows whose name already exists are skipped.
"""

import os
import sys
from decimal import Decimal

from travelly.infra.db import txn
from travelly.infra.repositories.customers_repository import insert_customer
from travelly.infra.repositories.rate_cards_repository import insert_rate_card

DEMO_CUSTOMERS = [
    {
        "name": "Amina Rahman",
        "address": "12 King Fahd Rd, Riyadh",
        "phone": "+966500000001",
        "email": "amina@example.com",
    },
    {
        "name": "Yusuf Haddad",
        "address": "4 Corniche St, Jeddah",
        "phone": "+966500000002",
        "email": "yusuf@example.com",
    },
]

DEMO_RATE_CARDS = [
    {
        "name": "Makkah Tower Suites",
        "location": "Makkah",
        "room_type": "double",
        "meal_package": "fullboard",
        "base_price": Decimal("350.50"),
        "markup_percentage": Decimal("15.75"),
    },
    {
        "name": "Madinah Garden Hotel",
        "location": "Madinah",
        "room_type": "quad",
        "meal_package": "halfboard",
        "base_price": Decimal("200.00"),
        "markup_percentage": Decimal("20.00"),
    },
]


def _exists(cur, table: str, name: str) -> bool:
    cur.execute(f"SELECT 1 FROM {table} WHERE name = %s LIMIT 1", (name,))
    return cur.fetchone() is not None


def main() -> int:
    if not os.environ.get("DATABASE_URL"):
        print("ERROR: DATABASE_URL not set")
        return 1

    created: dict[str, list[str]] = {"customers": [], "hotels": []}
    with txn() as cur:
        for customer in DEMO_CUSTOMERS:
            if not _exists(cur, "customers", customer["name"]):
                created["customers"].append(insert_customer(cur, **customer)["id"])
        for rate_card in DEMO_RATE_CARDS:
            if not _exists(cur, "hotels", rate_card["name"]):
                created["hotels"].append(insert_rate_card(cur, **rate_card)["id"])

    print("seed ok:", created)
    return 0


if __name__ == "__main__":
    sys.exit(main())
