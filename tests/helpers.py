"""Shared test helper functions for Travelly tests.

Regular functions (not fixtures) importable by conftest.py and test modules.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from travelly.domain.models import Customer, MealPackage, RateCard, RoomType
from travelly.infra.storage import InMemoryStorage
from travelly.services.booking_service import BookingService

T0 = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


def make_customer(name: str = "Amina Rahman", **overrides) -> Customer:
    fields = {
        "id": str(uuid.uuid4()),
        "name": name,
        "address": "12 King Fahd Rd, Riyadh",
        "phone": "+966500000001",
        "email": "amina@example.com",
        "created_at": T0,
    }
    fields.update(overrides)
    return Customer(**fields)


def make_rate_card(
    base_price: str = "200",
    markup_percentage: str = "20",
    name: str = "Madinah Garden Hotel",
    **overrides,
) -> RateCard:
    fields = {
        "id": str(uuid.uuid4()),
        "name": name,
        "location": "Madinah",
        "room_type": RoomType.DOUBLE,
        "meal_package": MealPackage.FULLBOARD,
        "base_price": Decimal(base_price),
        "markup_percentage": Decimal(markup_percentage),
        "created_at": T0,
    }
    fields.update(overrides)
    return RateCard(**fields)


class FixedClock:
    """Clock returning a settable instant."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def book(
    storage: InMemoryStorage,
    customer: Customer,
    rate_card: RateCard,
    *,
    check_in: date = date(2024, 1, 1),
    check_out: date = date(2024, 1, 3),
    room_count: int = 2,
    created_at: datetime = T0,
):
    """Create a booking through the service with a pinned creation time."""
    service = BookingService(storage, clock=FixedClock(created_at))
    return service.create_booking(customer.id, rate_card.id, check_in, check_out, room_count)
