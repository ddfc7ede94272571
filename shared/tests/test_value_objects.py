from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from shared.domain.value_objects import Money, TimeRange


def _at(hour, minute=0):
    return datetime(2030, 1, 7, hour, minute, tzinfo=dt_timezone.utc)


class TestMoney:
    def test_amount_is_quantized_to_cents(self):
        assert Money(Decimal("10.005"), "usd") == Money(Decimal("10.01"), "USD")

    def test_rejects_negative_amount_and_bad_currency(self):
        with pytest.raises(ValueError):
            Money(Decimal("-1"))
        with pytest.raises(ValueError):
            Money(Decimal("1"), "US")

    def test_minor_units(self):
        money = Money.from_minor_units(3050, "eur")
        assert money == Money(Decimal("30.50"), "EUR")
        assert money.to_minor_units() == 3050

    def test_percentage_rounds_half_up(self):
        assert Money(Decimal("99.99")).percentage(50).amount == Decimal("50.00")
        assert Money(Decimal("100.00")).percentage(30).amount == Decimal("30.00")

    def test_arithmetic_requires_same_currency(self):
        assert Money(Decimal("1.50")) + Money(Decimal("2.25")) == Money(Decimal("3.75"))
        assert Money(Decimal("1.00")) < Money(Decimal("2.00"))
        with pytest.raises(ValueError):
            Money(Decimal("1"), "USD") + Money(Decimal("1"), "EUR")


class TestTimeRange:
    def test_start_must_precede_end(self):
        with pytest.raises(ValueError):
            TimeRange(_at(10), _at(10))

    def test_overlap_is_half_open(self):
        ten_to_eleven = TimeRange(_at(10), _at(11))
        assert ten_to_eleven.overlaps_with(TimeRange(_at(10, 30), _at(11, 30)))
        assert not ten_to_eleven.overlaps_with(TimeRange(_at(11), _at(12)))
        assert not TimeRange(_at(11), _at(12)).overlaps_with(ten_to_eleven)

    def test_contains_and_duration(self):
        day = TimeRange(_at(9), _at(22))
        session = TimeRange.starting_at(_at(21), timedelta(hours=1))
        assert session.duration == timedelta(hours=1)
        assert day.contains(session)
        assert not day.contains(TimeRange.starting_at(_at(21, 30), timedelta(hours=1)))
