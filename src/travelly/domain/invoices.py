"""Invoice number generation.

Format: INV-YYYYMMDD-XXXXXXXXXXXX (UTC date + 12 hex chars of a UUID4).
The random part alone makes collisions unlikely; the unique constraint in
storage plus the booking factory's retry makes them impossible to persist.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from travelly.infra.time import utc_now

INVOICE_PREFIX = "INV"

_RANDOM_CHARS = 12


def generate_invoice_number(now: datetime | None = None) -> str:
    """Generate a new, human-legible invoice number."""
    now = now or utc_now()
    suffix = uuid.uuid4().hex[:_RANDOM_CHARS].upper()
    return f"{INVOICE_PREFIX}-{now:%Y%m%d}-{suffix}"
