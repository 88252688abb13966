"""Public-facing routes: health plus every back-office endpoint."""

from fastapi import APIRouter

from travelly.api.routes import bookings, catalog, invoices, reports

router = APIRouter()


@router.get("/health")
def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


router.include_router(bookings.router)
router.include_router(invoices.router)
router.include_router(reports.router)
router.include_router(catalog.router)
