"""Balance math shared by the payment ledger and the reports.

Both read paths must agree on when an invoice is settled, so they both go
through outstanding_balance(): totals are rounded to cents before they are
compared, and anything below half a cent is zero.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from travelly.domain.models import Payment
from travelly.domain.pricing import to_money

ZERO = Decimal("0.00")


def total_paid(payments: Iterable[Payment]) -> Decimal:
    return to_money(sum((p.amount for p in payments), ZERO))


def outstanding_balance(total_price: Decimal, paid: Decimal) -> Decimal:
    """Remaining balance, clamped at zero."""
    balance = to_money(total_price) - to_money(paid)
    return balance if balance > ZERO else ZERO


def is_settled(total_price: Decimal, paid: Decimal) -> bool:
    return outstanding_balance(total_price, paid) == ZERO
