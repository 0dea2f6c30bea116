"""Tests for zp_common.money: Decimal amount utilities."""

from decimal import Decimal

import pytest

from src.zp_common.money import amount_to_display, decimal_places, round_amount, to_amount


class TestToAmount:
    def test_string(self) -> None:
        assert to_amount("12.50") == Decimal("12.50")

    def test_strips_whitespace(self) -> None:
        assert to_amount("  7 ") == Decimal("7")

    def test_float_goes_through_str(self) -> None:
        assert to_amount(0.1) == Decimal("0.1")

    def test_int(self) -> None:
        assert to_amount(1000) == Decimal("1000")

    def test_decimal_passthrough(self) -> None:
        value = Decimal("3.14")
        assert to_amount(value) is value

    @pytest.mark.parametrize("value", ["", "abc", "1,000", "$5"])
    def test_not_a_number_raises(self, value: str) -> None:
        with pytest.raises(ValueError, match="Not a number"):
            to_amount(value)

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-inf"])
    def test_non_finite_raises(self, value: str) -> None:
        with pytest.raises(ValueError, match="finite"):
            to_amount(value)

    @pytest.mark.parametrize("value", ["1e30", "1" * 29, Decimal("1E+26")])
    def test_too_large_to_round_raises(self, value: object) -> None:
        with pytest.raises(ValueError, match="Out of range"):
            to_amount(value)

    def test_largest_roundable_magnitude(self) -> None:
        assert round_amount(to_amount("9" * 26)) == Decimal("9" * 26 + ".00")


class TestRoundAmount:
    def test_unroundable_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Cannot round"):
            round_amount(Decimal("1e30"))

    def test_half_up(self) -> None:
        assert round_amount(Decimal("10.005")) == Decimal("10.01")

    def test_below_half_rounds_down(self) -> None:
        assert round_amount(Decimal("10.004")) == Decimal("10.00")

    def test_pads_to_cents(self) -> None:
        assert str(round_amount(Decimal("5"))) == "5.00"


class TestDecimalPlaces:
    def test_whole_number(self) -> None:
        assert decimal_places(Decimal("100")) == 0

    def test_trailing_zero_ignored(self) -> None:
        assert decimal_places(Decimal("1.50")) == 1
        assert decimal_places(Decimal("1.500")) == 1

    def test_three_places(self) -> None:
        assert decimal_places(Decimal("1.505")) == 3

    def test_large_whole_number_with_exponent(self) -> None:
        # normalize() turns 1000 into 1E+3
        assert decimal_places(Decimal("1000.00")) == 0


class TestAmountToDisplay:
    def test_basic(self) -> None:
        assert amount_to_display(Decimal("65")) == "$65.00"

    def test_zero(self) -> None:
        assert amount_to_display(Decimal("0")) == "$0.00"

    def test_thousands_separator(self) -> None:
        assert amount_to_display(Decimal("1000")) == "$1,000.00"

    def test_negative(self) -> None:
        assert amount_to_display(Decimal("-12")) == "-$12.00"

    def test_rounds_for_display(self) -> None:
        assert amount_to_display(Decimal("0.005")) == "$0.01"
