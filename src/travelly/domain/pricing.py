"""Pricing calculator: rate card plus stay dates gives a priced booking.

Rules:
- All arithmetic uses Decimal at full precision.
- Each money value is rounded to cents exactly once, when it is reported.
- nights = ceil(check_out - check_in, in days); must be >= 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from travelly.domain.errors import InvalidDateRangeError, InvalidRoomCountError
from travelly.domain.models import RateCard

CENT = Decimal("0.01")

_SECONDS_PER_DAY = 86400


def to_money(value: Decimal) -> Decimal:
    """Round a Decimal to the currency minor unit (2 places, half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def count_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Return the number of nights between two dates.

    Calendar dates give an exact day count. Datetimes are accepted as well;
    a partial day counts as a full night.

    Raises:
        InvalidDateRangeError: check_out is not strictly after check_in.
    """
    if isinstance(check_in, datetime) != isinstance(check_out, datetime):
        raise InvalidDateRangeError("Check-in and check-out must be the same type")

    delta = check_out - check_in
    if isinstance(check_in, datetime):
        nights = math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)
    else:
        nights = delta.days

    if nights <= 0:
        raise InvalidDateRangeError()
    return nights


@dataclass(frozen=True)
class PriceBreakdown:
    nights: int
    base_price_per_night: Decimal
    selling_price_per_night: Decimal
    total_base_cost: Decimal
    total_selling_price: Decimal


def base_cost(rate_card: RateCard, nights: int, room_count: int) -> Decimal:
    """Unmarked-up cost of a stay, rounded to cents."""
    return to_money(rate_card.base_price * nights * room_count)


def price(
    rate_card: RateCard,
    check_in: date | datetime,
    check_out: date | datetime,
    room_count: int,
) -> PriceBreakdown:
    """Price a stay against a rate card.

    Args:
        rate_card: Hotel rate card (base price + markup).
        check_in: Check-in date.
        check_out: Check-out date (exclusive).
        room_count: Number of rooms (must be > 0).

    Returns:
        PriceBreakdown with money fields rounded to cents.

    Raises:
        InvalidDateRangeError: check_out not after check_in.
        InvalidRoomCountError: room_count <= 0.
    """
    nights = count_nights(check_in, check_out)
    if room_count <= 0:
        raise InvalidRoomCountError(room_count)

    selling_per_night = rate_card.selling_price_per_night

    return PriceBreakdown(
        nights=nights,
        base_price_per_night=to_money(rate_card.base_price),
        selling_price_per_night=to_money(selling_per_night),
        total_base_cost=base_cost(rate_card, nights, room_count),
        total_selling_price=to_money(selling_per_night * nights * room_count),
    )
