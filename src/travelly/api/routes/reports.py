"""Reports endpoints for the back office.

READ-only financial reports, rebuilt from the full booking ledger on every
request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from travelly.api.deps import get_reporting_service
from travelly.domain.models import (
    MonthlyReportFilter,
    MonthlyRow,
    OutstandingRow,
    ProfitLossRow,
)
from travelly.services.reporting_service import ReportingService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/profit-loss")
def get_profit_loss_report(
    service: ReportingService = Depends(get_reporting_service),
) -> list[ProfitLossRow]:
    """One row per booking: recomputed base cost, selling price and profit."""
    return service.profit_loss_report()


@router.get("/monthly")
def get_monthly_report(
    year: int | None = Query(None, description="Only bookings created in this year"),
    month: int | None = Query(None, description="Only bookings created in this month (1-12)"),
    service: ReportingService = Depends(get_reporting_service),
) -> list[MonthlyRow]:
    """Booking count, revenue and profit per creation month.

    Month out of range is a 422 from the engine, same as other validation errors.
    """
    report_filter = None
    if year is not None or month is not None:
        report_filter = MonthlyReportFilter(year=year, month=month)
    return service.monthly_report(report_filter)


@router.get("/outstanding")
def get_outstanding_invoices(
    service: ReportingService = Depends(get_reporting_service),
) -> list[OutstandingRow]:
    """Invoices with a balance still due."""
    return service.outstanding_invoices()
