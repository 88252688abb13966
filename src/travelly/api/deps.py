"""FastAPI dependencies: storage backend and engine services.

The storage is a module-level singleton built on first use from
STORAGE_BACKEND (postgres | memory). When STORAGE_BACKEND is unset, Postgres
is used if DATABASE_URL is set, memory otherwise. Tests replace get_storage
through app.dependency_overrides.
"""

from __future__ import annotations

import os
import threading

from fastapi import Depends

from travelly.infra.storage import InMemoryStorage, Storage
from travelly.services.booking_service import BookingService
from travelly.services.ledger_service import PaymentLedger
from travelly.services.reporting_service import ReportingService

_storage: Storage | None = None
_storage_lock = threading.Lock()


def _build_storage() -> Storage:
    backend = os.environ.get("STORAGE_BACKEND")
    if not backend:
        backend = "postgres" if os.environ.get("DATABASE_URL") else "memory"

    if backend == "postgres":
        from travelly.infra.postgres_storage import PostgresStorage

        return PostgresStorage()
    if backend == "memory":
        return InMemoryStorage()
    raise RuntimeError(f"Unknown STORAGE_BACKEND: {backend}")


def get_storage() -> Storage:
    """Get the process-wide storage (allows override in tests)."""
    global _storage
    if _storage is None:
        with _storage_lock:
            if _storage is None:
                _storage = _build_storage()
    return _storage


def reset_storage() -> None:
    """Drop the cached storage so the next request rebuilds it from env."""
    global _storage
    with _storage_lock:
        _storage = None


def get_booking_service(storage: Storage = Depends(get_storage)) -> BookingService:
    return BookingService(storage)


def get_payment_ledger(storage: Storage = Depends(get_storage)) -> PaymentLedger:
    return PaymentLedger(storage)


def get_reporting_service(storage: Storage = Depends(get_storage)) -> ReportingService:
    return ReportingService(storage)
