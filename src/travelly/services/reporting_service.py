"""Reporting service — profit/loss, monthly and outstanding-invoice reports.

Read-only. Each call loads the full booking list and rebuilds the report;
nothing is cached between calls. Customer and rate card lookups are memoized
per call only.
"""

from __future__ import annotations

from travelly.domain import reports
from travelly.domain.errors import IntegrityError
from travelly.domain.models import (
    Customer,
    MonthlyReportFilter,
    MonthlyRow,
    OutstandingRow,
    ProfitLossRow,
    RateCard,
)
from travelly.infra.storage import Storage


class _Lookups:
    """Per-report cache of customers and rate cards."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._customers: dict[str, Customer] = {}
        self._rate_cards: dict[str, RateCard] = {}

    def customer(self, customer_id: str) -> Customer:
        if customer_id not in self._customers:
            customer = self._storage.get_customer(customer_id)
            if customer is None:
                raise IntegrityError(f"Booking references missing customer {customer_id}")
            self._customers[customer_id] = customer
        return self._customers[customer_id]

    def rate_card(self, hotel_id: str) -> RateCard:
        if hotel_id not in self._rate_cards:
            rate_card = self._storage.get_rate_card(hotel_id)
            if rate_card is None:
                raise IntegrityError(f"Booking references missing hotel {hotel_id}")
            self._rate_cards[hotel_id] = rate_card
        return self._rate_cards[hotel_id]


class ReportingService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def profit_loss_report(self) -> list[ProfitLossRow]:
        lookups = _Lookups(self._storage)
        return reports.build_profit_loss(
            self._storage.list_bookings(),
            customer_for=lookups.customer,
            rate_card_for=lookups.rate_card,
        )

    def monthly_report(
        self,
        report_filter: MonthlyReportFilter | None = None,
    ) -> list[MonthlyRow]:
        """Bookings grouped by creation month, optionally filtered.

        Raises:
            InvalidReportFilterError: month outside 1..12.
        """
        reports.validate_monthly_filter(report_filter)
        lookups = _Lookups(self._storage)
        return reports.build_monthly(
            self._storage.list_bookings(),
            rate_card_for=lookups.rate_card,
            report_filter=report_filter,
        )

    def outstanding_invoices(self) -> list[OutstandingRow]:
        lookups = _Lookups(self._storage)
        return reports.build_outstanding(
            self._storage.list_bookings(),
            customer_for=lookups.customer,
            rate_card_for=lookups.rate_card,
            payments_for=self._storage.list_payments_for_booking,
        )
