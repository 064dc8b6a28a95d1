"""
Tests for stay pricing and date arithmetic.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from homelyhub.services.pricing import (
    StayQuote,
    calculate_nights,
    calculate_total_amount,
    normalize_stay_date,
    quote_stay,
)
from homelyhub.utils.exceptions import ValidationError


class TestCalculateNights:
    """Night counting."""

    def test_two_nights(self):
        assert calculate_nights(date(2024, 1, 1), date(2024, 1, 3)) == 2

    def test_partial_day_rounds_up(self):
        check_in = datetime(2024, 1, 1, 14, 0, tzinfo=timezone.utc)
        check_out = datetime(2024, 1, 3, 11, 0, tzinfo=timezone.utc)
        assert calculate_nights(check_in, check_out) == 2

        check_out = datetime(2024, 1, 3, 14, 1, tzinfo=timezone.utc)
        assert calculate_nights(check_in, check_out) == 3

    def test_one_second_is_a_night(self):
        check_in = datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert calculate_nights(check_in, check_in + timedelta(seconds=1)) == 1

    def test_same_day_is_zero(self):
        assert calculate_nights(date(2024, 1, 1), date(2024, 1, 1)) == 0

    def test_reversed_range_is_negative(self):
        assert calculate_nights(date(2024, 1, 3), date(2024, 1, 1)) == -2

    def test_naive_datetimes_are_utc(self):
        naive = datetime(2024, 1, 1)
        aware = datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert calculate_nights(naive, aware) == 1

    def test_offsets_are_respected(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        check_in = datetime(2024, 1, 1, 5, 30, tzinfo=ist)  # midnight UTC
        check_out = datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert calculate_nights(check_in, check_out) == 1


class TestTotals:
    """Total charge and quotes."""

    def test_total_amount(self):
        assert calculate_total_amount(Decimal("1000"), 2) == Decimal("2000.00")

    def test_total_amount_keeps_paise(self):
        assert calculate_total_amount(Decimal("1499.50"), 3) == Decimal("4498.50")

    def test_total_amount_from_float(self):
        assert calculate_total_amount(99.99, 3) == Decimal("299.97")

    def test_quote_stay(self):
        quote = quote_stay(date(2024, 1, 1), date(2024, 1, 3), Decimal("1000"))
        assert quote == StayQuote(nights=2, total_amount=Decimal("2000.00"))

    @pytest.mark.parametrize("check_out", [date(2024, 1, 1), date(2023, 12, 31)])
    def test_quote_rejects_empty_or_reversed_range(self, check_out):
        with pytest.raises(ValidationError, match="Check-out date must be after check-in date"):
            quote_stay(date(2024, 1, 1), check_out, Decimal("1000"))

    def test_quote_is_deterministic(self):
        first = quote_stay(date(2024, 3, 10), date(2024, 3, 17), Decimal("2500"))
        second = quote_stay(date(2024, 3, 10), date(2024, 3, 17), Decimal("2500"))
        assert first == second
        assert first.nights == 7
        assert first.total_amount == Decimal("17500.00")


def test_normalize_plain_date_is_midnight_utc():
    assert normalize_stay_date(date(2024, 1, 1)) == datetime(2024, 1, 1, tzinfo=timezone.utc)
