"""Booking domain: enums and pydantic schemas.

Money fields are Decimal with two decimal places. Entities are frozen:
bookings and payments are never updated after they are written.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ─────────────────────────────────────────────────


class RoomType(str, Enum):
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"


class MealPackage(str, Enum):
    FULLBOARD = "fullboard"
    HALFBOARD = "halfboard"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    ONLINE = "online"


# ── Entities ─────────────────────────────────────────────


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Customer(_Frozen):
    id: str
    name: str
    address: str
    phone: str
    email: str
    created_at: datetime


class RateCard(_Frozen):
    """A hotel's priceable unit: room type, meal package, base price and markup."""

    id: str
    name: str
    location: str
    room_type: RoomType
    meal_package: MealPackage
    base_price: Decimal = Field(..., gt=0)
    markup_percentage: Decimal = Field(..., ge=0)
    created_at: datetime

    @field_validator("base_price", "markup_percentage")
    @classmethod
    def _two_places(cls, value: Decimal) -> Decimal:
        return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def selling_price_per_night(self) -> Decimal:
        """Unrounded selling price; round with pricing.to_money for display."""
        return self.base_price * (1 + self.markup_percentage / 100)


class NewBooking(_Frozen):
    """Booking fields known before storage assigns an id."""

    customer_id: str
    hotel_id: str
    check_in_date: date
    check_out_date: date
    room_count: int
    total_price: Decimal
    invoice_number: str
    created_at: datetime


class Booking(NewBooking):
    id: str


class NewPayment(_Frozen):
    booking_id: str
    invoice_number: str
    amount: Decimal
    payment_method: PaymentMethod
    payment_date: datetime
    created_at: datetime


class Payment(NewPayment):
    id: str


# ── Derived views ────────────────────────────────────────


class BookingSummary(_Frozen):
    customer: Customer
    hotel: RateCard
    check_in_date: date
    check_out_date: date
    room_count: int
    nights: int
    base_price_per_night: Decimal
    selling_price_per_night: Decimal
    total_base_cost: Decimal
    total_selling_price: Decimal


class InvoiceDetail(_Frozen):
    booking: Booking
    customer: Customer
    hotel: RateCard
    payments: list[Payment]
    total_paid: Decimal
    outstanding_balance: Decimal


class ProfitLossRow(_Frozen):
    invoice_number: str
    customer_name: str
    hotel_name: str
    base_cost: Decimal
    selling_price: Decimal
    profit: Decimal
    booking_date: datetime


class MonthlyRow(_Frozen):
    year: int
    month: int
    booking_count: int
    total_revenue: Decimal
    total_profit: Decimal


class OutstandingRow(_Frozen):
    invoice_number: str
    customer_name: str
    hotel_name: str
    total_amount: Decimal
    paid_amount: Decimal
    outstanding_amount: Decimal
    booking_date: datetime


class MonthlyReportFilter(_Frozen):
    year: int | None = None
    month: int | None = None
