"""Tests for the payment ledger: overpayment guard, invoice detail, deletes."""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from decimal import Decimal

from unittest.mock import MagicMock, patch

import pytest

from helpers import T0, FixedClock, book, make_customer, make_rate_card
from travelly.domain.errors import (
    BookingNotFoundError,
    CustomerInUseError,
    CustomerNotFoundError,
    IntegrityError,
    InvalidAmountError,
    OverpaymentRejectedError,
    RateCardInUseError,
    RateCardNotFoundError,
    ReferentialConflictError,
    ValidationError,
)
from travelly.domain.models import PaymentMethod
from travelly.services.booking_service import BookingService
from travelly.services.ledger_service import PaymentLedger
from travelly.services.reporting_service import ReportingService


def _booking_for(storage, total: str):
    """Book one night, two rooms at half the total with no markup."""
    customer = storage.add_customer(make_customer())
    rate_card = storage.add_rate_card(
        make_rate_card(base_price=str(Decimal(total) / 2), markup_percentage="0")
    )
    booking = book(
        storage,
        customer,
        rate_card,
        check_in=date(2024, 1, 1),
        check_out=date(2024, 1, 2),
        room_count=2,
    )
    assert booking.total_price == Decimal(total)
    return booking


class TestRecordPayment:
    def test_records_payment_with_invoice_number(self, storage, clock):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage, clock=clock)

        payment = ledger.record_payment(booking.id, Decimal("600"), PaymentMethod.CASH)

        assert payment.booking_id == booking.id
        assert payment.invoice_number == booking.invoice_number
        assert payment.amount == Decimal("600")
        assert payment.payment_method == PaymentMethod.CASH
        assert payment.payment_date == T0
        assert payment.created_at == T0
        assert storage.list_payments_for_booking(booking.id) == [payment]

    def test_overpayment_rejected_balance_unchanged(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        ledger.record_payment(booking.id, Decimal("600"), PaymentMethod.CARD)
        with pytest.raises(OverpaymentRejectedError) as exc_info:
            ledger.record_payment(booking.id, Decimal("500"), PaymentMethod.CARD)

        assert isinstance(exc_info.value, ValidationError)
        assert exc_info.value.outstanding == Decimal("400.00")
        detail = ledger.get_invoice_detail(booking.invoice_number)
        assert detail.total_paid == Decimal("600.00")
        assert detail.outstanding_balance == Decimal("400.00")
        assert len(detail.payments) == 1

    def test_exact_settlement(self, storage):
        booking = _booking_for(storage, "800")
        ledger = PaymentLedger(storage)

        ledger.record_payment(booking.id, Decimal("800"), PaymentMethod.BANK_TRANSFER)

        detail = ledger.get_invoice_detail(booking.invoice_number)
        assert detail.outstanding_balance == Decimal("0.00")
        outstanding = ReportingService(storage).outstanding_invoices()
        assert booking.invoice_number not in [row.invoice_number for row in outstanding]

    def test_payment_after_settlement_rejected(self, storage):
        booking = _booking_for(storage, "800")
        ledger = PaymentLedger(storage)
        ledger.record_payment(booking.id, Decimal("800"), PaymentMethod.CASH)

        with pytest.raises(OverpaymentRejectedError):
            ledger.record_payment(booking.id, Decimal("0.01"), PaymentMethod.CASH)

    def test_partial_payments_accumulate(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        for amount in ("250.25", "249.75", "500"):
            ledger.record_payment(booking.id, Decimal(amount), PaymentMethod.ONLINE)

        detail = ledger.get_invoice_detail(booking.invoice_number)
        assert detail.total_paid == Decimal("1000.00")
        assert detail.outstanding_balance == Decimal("0.00")

    @pytest.mark.parametrize("amount", ["0", "-1", "-0.01", "NaN", "Infinity"])
    def test_non_positive_or_non_finite_amount(self, storage, amount):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        with pytest.raises(InvalidAmountError):
            ledger.record_payment(booking.id, Decimal(amount), PaymentMethod.CASH)

        assert storage.list_payments_for_booking(booking.id) == []

    def test_sub_cent_amount_rejected(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        with pytest.raises(InvalidAmountError, match="two decimal places"):
            ledger.record_payment(booking.id, Decimal("10.005"), PaymentMethod.CASH)

    def test_whole_amount_stored_with_cents(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        payment = ledger.record_payment(booking.id, Decimal("600"), PaymentMethod.CASH)

        assert str(payment.amount) == "600.00"
        assert str(storage.list_payments_for_booking(booking.id)[0].amount) == "600.00"

    def test_string_amount_accepted(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        payment = ledger.record_payment(booking.id, "99.90", "cash")

        assert payment.amount == Decimal("99.90")
        assert payment.payment_method == PaymentMethod.CASH

    def test_unknown_method(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)

        with pytest.raises(ValidationError):
            ledger.record_payment(booking.id, Decimal("10"), "cheque")

    def test_unknown_booking(self, storage):
        ledger = PaymentLedger(storage)
        with pytest.raises(BookingNotFoundError):
            ledger.record_payment(str(uuid.uuid4()), Decimal("10"), PaymentMethod.CASH)


class TestConcurrentPayments:
    def test_concurrent_payments_never_overpay(self, storage):
        """Ten parallel 200.00 payments against 1000.00: exactly five succeed."""
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)
        barrier = threading.Barrier(10)

        def pay():
            barrier.wait()
            try:
                ledger.record_payment(booking.id, Decimal("200.00"), PaymentMethod.CARD)
                return True
            except OverpaymentRejectedError:
                return False

        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(pool.map(lambda _: pay(), range(10)))

        assert results.count(True) == 5
        detail = ledger.get_invoice_detail(booking.invoice_number)
        assert detail.total_paid == Decimal("1000.00")
        assert detail.outstanding_balance == Decimal("0.00")

    def test_payments_on_different_invoices_are_independent(self, storage):
        first = _booking_for(storage, "400")
        second = _booking_for(storage, "400")
        ledger = PaymentLedger(storage)

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(
                pool.map(
                    lambda booking_id: ledger.record_payment(
                        booking_id, Decimal("100"), PaymentMethod.CASH
                    ),
                    [first.id, second.id] * 4,
                )
            )

        for booking in (first, second):
            detail = ledger.get_invoice_detail(booking.invoice_number)
            assert detail.outstanding_balance == Decimal("0.00")


class TestInvoiceDetail:
    def test_unknown_invoice_is_none(self, storage):
        assert PaymentLedger(storage).get_invoice_detail("INV-20240101-000000000000") is None

    def test_includes_booking_customer_and_hotel(self, storage, customer, rate_card):
        booking = book(storage, customer, rate_card)

        detail = PaymentLedger(storage).get_invoice_detail(booking.invoice_number)

        assert detail.booking == booking
        assert detail.customer == customer
        assert detail.hotel == rate_card
        assert detail.payments == []
        assert detail.total_paid == Decimal("0.00")
        assert detail.outstanding_balance == Decimal("960.00")

    def test_payments_in_recorded_order(self, storage):
        booking = _booking_for(storage, "1000")
        clock = FixedClock()
        ledger = PaymentLedger(storage, clock=clock)

        first = ledger.record_payment(booking.id, Decimal("100"), PaymentMethod.CASH)
        clock.now = T0 + timedelta(days=1)
        second = ledger.record_payment(booking.id, Decimal("200"), PaymentMethod.CARD)

        detail = ledger.get_invoice_detail(booking.invoice_number)
        assert detail.payments == [first, second]

    def test_repeated_reads_are_identical(self, storage):
        booking = _booking_for(storage, "1000")
        ledger = PaymentLedger(storage)
        ledger.record_payment(booking.id, Decimal("123.45"), PaymentMethod.CASH)

        first = ledger.get_invoice_detail(booking.invoice_number)
        second = ledger.get_invoice_detail(booking.invoice_number)

        assert first == second

    def test_missing_customer_is_integrity_error(self, storage, customer, rate_card):
        booking = book(storage, customer, rate_card)
        dangling = MagicMock(wraps=storage)
        dangling.get_customer.return_value = None

        with pytest.raises(IntegrityError):
            PaymentLedger(dangling).get_invoice_detail(booking.invoice_number)


class TestDeletionGuard:
    def test_in_use_errors_are_referential_conflicts(self, storage, customer, rate_card):
        book(storage, customer, rate_card)
        ledger = PaymentLedger(storage)

        with pytest.raises(CustomerInUseError) as customer_exc:
            ledger.delete_customer(customer.id)
        with pytest.raises(RateCardInUseError) as hotel_exc:
            ledger.delete_rate_card(rate_card.id)

        assert customer_exc.value.code == "referential_conflict"
        assert hotel_exc.value.code == "referential_conflict"

    def test_customer_with_bookings_cannot_be_deleted(self, storage, customer, rate_card):
        book(storage, customer, rate_card)

        with pytest.raises(ReferentialConflictError):
            PaymentLedger(storage).delete_customer(customer.id)

        assert storage.get_customer(customer.id) == customer

    def test_hotel_with_bookings_cannot_be_deleted(self, storage, customer, rate_card):
        book(storage, customer, rate_card)

        with pytest.raises(ReferentialConflictError):
            PaymentLedger(storage).delete_rate_card(rate_card.id)

        assert storage.get_rate_card(rate_card.id) == rate_card

    def test_unreferenced_rows_are_deleted(self, storage, customer, rate_card):
        ledger = PaymentLedger(storage)

        ledger.delete_customer(customer.id)
        ledger.delete_rate_card(rate_card.id)

        assert storage.get_customer(customer.id) is None
        assert storage.get_rate_card(rate_card.id) is None

    def test_delete_unknown_customer(self, storage):
        with pytest.raises(CustomerNotFoundError):
            PaymentLedger(storage).delete_customer(str(uuid.uuid4()))

    def test_delete_unknown_hotel(self, storage):
        with pytest.raises(RateCardNotFoundError):
            PaymentLedger(storage).delete_rate_card(str(uuid.uuid4()))


class TestDeleteDuringBooking:
    """A delete landing between the booking's lookups and its insert."""

    def _delete_after_lookup(self, storage, delete):
        real_get_rate_card = storage.get_rate_card

        def get_rate_card_then_delete(hotel_id):
            rate_card = real_get_rate_card(hotel_id)
            delete()
            return rate_card

        return patch.object(storage, "get_rate_card", side_effect=get_rate_card_then_delete)

    def test_customer_deleted_mid_create_leaves_no_booking(self, storage, customer, rate_card):
        ledger = PaymentLedger(storage)
        service = BookingService(storage)

        with self._delete_after_lookup(storage, lambda: ledger.delete_customer(customer.id)):
            with pytest.raises(CustomerNotFoundError):
                service.create_booking(
                    customer.id, rate_card.id, date(2024, 1, 1), date(2024, 1, 3), 1
                )

        assert storage.get_customer(customer.id) is None
        assert storage.list_bookings() == []
        assert ReportingService(storage).outstanding_invoices() == []
        assert ReportingService(storage).profit_loss_report() == []

    def test_hotel_deleted_mid_create_leaves_no_booking(self, storage, customer, rate_card):
        ledger = PaymentLedger(storage)
        service = BookingService(storage)

        with self._delete_after_lookup(storage, lambda: ledger.delete_rate_card(rate_card.id)):
            with pytest.raises(RateCardNotFoundError):
                service.create_booking(
                    customer.id, rate_card.id, date(2024, 1, 1), date(2024, 1, 3), 1
                )

        assert storage.list_bookings() == []
        assert ReportingService(storage).outstanding_invoices() == []


class TestStorageReferences:
    def test_delete_referenced_customer_raises(self, storage, customer, rate_card):
        book(storage, customer, rate_card)

        with pytest.raises(CustomerInUseError):
            storage.delete_customer(customer.id)

        assert storage.get_customer(customer.id) == customer

    def test_delete_referenced_rate_card_raises(self, storage, customer, rate_card):
        book(storage, customer, rate_card)

        with pytest.raises(RateCardInUseError):
            storage.delete_rate_card(rate_card.id)

        assert storage.get_rate_card(rate_card.id) == rate_card

    def test_delete_absent_rows_returns_false(self, storage):
        assert storage.delete_customer(str(uuid.uuid4())) is False
        assert storage.delete_rate_card(str(uuid.uuid4())) is False

    def test_concurrent_delete_and_create_never_dangle(self, storage):
        for _ in range(20):
            customer = storage.add_customer(make_customer())
            rate_card = storage.add_rate_card(make_rate_card())
            barrier = threading.Barrier(2)

            def create():
                barrier.wait()
                try:
                    book(storage, customer, rate_card)
                except CustomerNotFoundError:
                    pass

            def delete():
                barrier.wait()
                try:
                    PaymentLedger(storage).delete_customer(customer.id)
                except ReferentialConflictError:
                    pass

            with ThreadPoolExecutor(max_workers=2) as pool:
                for future in [pool.submit(create), pool.submit(delete)]:
                    future.result()

        for booking in storage.list_bookings():
            assert storage.get_customer(booking.customer_id) is not None
