"""Report aggregation: pure functions over bookings and payments.

Every report is rebuilt from the full booking list on each call. Callers
supply lookups for customers, rate cards and payments so these functions
never touch storage.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Sequence

from travelly.domain.errors import InvalidReportFilterError
from travelly.domain.ledger import ZERO, outstanding_balance, total_paid
from travelly.domain.models import (
    Booking,
    Customer,
    MonthlyReportFilter,
    MonthlyRow,
    OutstandingRow,
    Payment,
    ProfitLossRow,
    RateCard,
)
from travelly.domain.pricing import base_cost, count_nights, to_money
from travelly.infra.time import as_utc

CustomerLookup = Callable[[str], Customer]
RateCardLookup = Callable[[str], RateCard]
PaymentsLookup = Callable[[str], Sequence[Payment]]


def _in_booking_order(bookings: Iterable[Booking]) -> list[Booking]:
    return sorted(bookings, key=lambda b: (b.created_at, b.id))


def booking_profit(booking: Booking, rate_card: RateCard) -> tuple[Decimal, Decimal]:
    """Return (base_cost, profit) for a booking.

    Base cost is recomputed from the rate card and the stay dates rather than
    derived from the stored price, so rate-card drift shows up as profit drift.
    """
    nights = count_nights(booking.check_in_date, booking.check_out_date)
    cost = base_cost(rate_card, nights, booking.room_count)
    return cost, to_money(booking.total_price) - cost


def build_profit_loss(
    bookings: Iterable[Booking],
    *,
    customer_for: CustomerLookup,
    rate_card_for: RateCardLookup,
) -> list[ProfitLossRow]:
    rows: list[ProfitLossRow] = []
    for booking in _in_booking_order(bookings):
        rate_card = rate_card_for(booking.hotel_id)
        cost, profit = booking_profit(booking, rate_card)
        rows.append(
            ProfitLossRow(
                invoice_number=booking.invoice_number,
                customer_name=customer_for(booking.customer_id).name,
                hotel_name=rate_card.name,
                base_cost=cost,
                selling_price=to_money(booking.total_price),
                profit=profit,
                booking_date=booking.created_at,
            )
        )
    return rows


def validate_monthly_filter(report_filter: MonthlyReportFilter | None) -> None:
    if report_filter is None:
        return
    if report_filter.month is not None and not 1 <= report_filter.month <= 12:
        raise InvalidReportFilterError(
            f"Month must be between 1 and 12, got {report_filter.month}"
        )
    if report_filter.year is not None and report_filter.year < 1:
        raise InvalidReportFilterError(f"Invalid year {report_filter.year}")


def build_monthly(
    bookings: Iterable[Booking],
    *,
    rate_card_for: RateCardLookup,
    report_filter: MonthlyReportFilter | None = None,
) -> list[MonthlyRow]:
    """Group bookings by (year, month) of their creation timestamp.

    Raises:
        InvalidReportFilterError: month outside 1..12 or non-positive year.
    """
    validate_monthly_filter(report_filter)
    year = report_filter.year if report_filter else None
    month = report_filter.month if report_filter else None

    counts: dict[tuple[int, int], int] = defaultdict(int)
    revenue: dict[tuple[int, int], Decimal] = defaultdict(lambda: ZERO)
    profit: dict[tuple[int, int], Decimal] = defaultdict(lambda: ZERO)

    for booking in bookings:
        created_at = as_utc(booking.created_at)
        key = (created_at.year, created_at.month)
        if year is not None and key[0] != year:
            continue
        if month is not None and key[1] != month:
            continue
        _, booking_profit_value = booking_profit(booking, rate_card_for(booking.hotel_id))
        counts[key] += 1
        revenue[key] += to_money(booking.total_price)
        profit[key] += booking_profit_value

    return [
        MonthlyRow(
            year=key[0],
            month=key[1],
            booking_count=counts[key],
            total_revenue=revenue[key],
            total_profit=profit[key],
        )
        for key in sorted(counts)
    ]


def build_outstanding(
    bookings: Iterable[Booking],
    *,
    customer_for: CustomerLookup,
    rate_card_for: RateCardLookup,
    payments_for: PaymentsLookup,
) -> list[OutstandingRow]:
    rows: list[OutstandingRow] = []
    for booking in _in_booking_order(bookings):
        paid = total_paid(payments_for(booking.id))
        outstanding = outstanding_balance(booking.total_price, paid)
        if outstanding == ZERO:
            continue
        rows.append(
            OutstandingRow(
                invoice_number=booking.invoice_number,
                customer_name=customer_for(booking.customer_id).name,
                hotel_name=rate_card_for(booking.hotel_id).name,
                total_amount=to_money(booking.total_price),
                paid_amount=paid,
                outstanding_amount=outstanding,
                booking_date=booking.created_at,
            )
        )
    return rows
