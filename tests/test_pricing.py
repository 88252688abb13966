"""Tests for the pricing calculator."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from helpers import make_rate_card
from travelly.domain.errors import (
    InvalidDateRangeError,
    InvalidRoomCountError,
    ValidationError,
)
from travelly.domain.pricing import count_nights, price, to_money


class TestCountNights:
    def test_calendar_dates(self):
        assert count_nights(date(2024, 1, 1), date(2024, 1, 3)) == 2

    def test_single_night(self):
        assert count_nights(date(2024, 1, 1), date(2024, 1, 2)) == 1

    def test_across_month_and_leap_day(self):
        assert count_nights(date(2024, 2, 27), date(2024, 3, 2)) == 4

    def test_across_year_boundary(self):
        assert count_nights(date(2023, 12, 30), date(2024, 1, 2)) == 3

    def test_partial_day_rounds_up(self):
        check_in = datetime(2024, 1, 1, 14, 0, tzinfo=timezone.utc)
        check_out = datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)
        assert count_nights(check_in, check_out) == 2

    def test_short_datetime_stay_is_one_night(self):
        check_in = datetime(2024, 1, 1, 14, 0)
        assert count_nights(check_in, check_in + timedelta(hours=1)) == 1

    @pytest.mark.parametrize(
        "check_in,check_out",
        [
            (date(2024, 1, 1), date(2024, 1, 1)),
            (date(2024, 1, 3), date(2024, 1, 1)),
        ],
    )
    def test_check_out_not_after_check_in_fails(self, check_in, check_out):
        with pytest.raises(InvalidDateRangeError):
            count_nights(check_in, check_out)

    def test_mixed_date_and_datetime_fails(self):
        with pytest.raises(InvalidDateRangeError):
            count_nights(date(2024, 1, 1), datetime(2024, 1, 3))


class TestPrice:
    def test_scenario_two_nights_two_rooms(self):
        rate_card = make_rate_card(base_price="200", markup_percentage="20")

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 3), 2)

        assert result.nights == 2
        assert result.base_price_per_night == Decimal("200.00")
        assert result.selling_price_per_night == Decimal("240.00")
        assert result.total_base_cost == Decimal("800.00")
        assert result.total_selling_price == Decimal("960.00")

    def test_scenario_one_night_one_room(self):
        rate_card = make_rate_card(base_price="200", markup_percentage="20")

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 2), 1)

        assert result.total_selling_price == Decimal("240.00")

    def test_fractional_markup_rounds_only_at_the_end(self):
        # 350.50 * 1.1575 = 405.70375 per night
        rate_card = make_rate_card(base_price="350.50", markup_percentage="15.75")

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 4), 3)

        assert result.selling_price_per_night == Decimal("405.70")
        # 405.70375 * 9 = 3651.33375, not 405.70 * 9 = 3651.30
        assert result.total_selling_price == Decimal("3651.33")
        assert result.total_base_cost == Decimal("3154.50")

    def test_money_fields_have_two_decimal_places(self):
        rate_card = make_rate_card(base_price="350.50", markup_percentage="15.75")

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 2), 1)

        for value in (
            result.base_price_per_night,
            result.selling_price_per_night,
            result.total_base_cost,
            result.total_selling_price,
        ):
            assert value.as_tuple().exponent == -2

    def test_zero_markup_sells_at_base(self):
        rate_card = make_rate_card(base_price="150", markup_percentage="0")

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 2), 1)

        assert result.selling_price_per_night == result.base_price_per_night

    @pytest.mark.parametrize("markup", ["0", "0.01", "5", "20", "150"])
    def test_selling_never_below_base(self, markup):
        rate_card = make_rate_card(base_price="99.99", markup_percentage=markup)

        result = price(rate_card, date(2024, 1, 1), date(2024, 1, 5), 2)

        assert result.selling_price_per_night >= result.base_price_per_night
        assert result.total_selling_price >= result.total_base_cost

    def test_same_day_is_a_validation_error(self):
        rate_card = make_rate_card()
        with pytest.raises(ValidationError):
            price(rate_card, date(2024, 1, 1), date(2024, 1, 1), 1)

    @pytest.mark.parametrize("room_count", [0, -1])
    def test_non_positive_room_count(self, room_count):
        rate_card = make_rate_card()
        with pytest.raises(InvalidRoomCountError):
            price(rate_card, date(2024, 1, 1), date(2024, 1, 2), room_count)

    def test_deterministic(self):
        rate_card = make_rate_card(base_price="123.45", markup_percentage="7.5")
        first = price(rate_card, date(2024, 5, 1), date(2024, 5, 8), 3)
        second = price(rate_card, date(2024, 5, 1), date(2024, 5, 8), 3)
        assert first == second


class TestToMoney:
    def test_half_up(self):
        assert to_money(Decimal("0.005")) == Decimal("0.01")
        assert to_money(Decimal("0.0049")) == Decimal("0.00")

    def test_rate_card_selling_price_property(self):
        rate_card = make_rate_card(base_price="350.50", markup_percentage="15.75")
        assert rate_card.selling_price_per_night == Decimal("405.70375")


class TestRateCardAmounts:
    def test_whole_amounts_carry_cents(self):
        rate_card = make_rate_card(base_price="200", markup_percentage="20")

        assert str(rate_card.base_price) == "200.00"
        assert str(rate_card.markup_percentage) == "20.00"

    def test_sub_cent_amounts_round_half_up(self):
        rate_card = make_rate_card(base_price="99.995", markup_percentage="7.125")

        assert rate_card.base_price == Decimal("100.00")
        assert rate_card.markup_percentage == Decimal("7.13")
