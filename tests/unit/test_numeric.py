"""Unit tests for the fixed-point Decimal."""
from __future__ import annotations

import pytest

from trovekit.numeric import MAX_UINT256, Decimal


class TestConstruction:
    def test_from_int(self) -> None:
        assert Decimal(3).raw == 3 * 10**18

    def test_from_string(self) -> None:
        assert Decimal("1.5").raw == 15 * 10**17

    def test_from_float_uses_shortest_repr(self) -> None:
        assert Decimal(0.1) == Decimal("0.1")

    def test_excess_digits_truncate(self) -> None:
        assert Decimal("0.0000000000000000019").raw == 1

    def test_from_raw_and_hex(self) -> None:
        assert Decimal.from_raw(10**18) == Decimal.ONE
        assert Decimal.from_hex("0xde0b6b3a7640000") == Decimal.ONE
        assert Decimal.ONE.hex == "0xde0b6b3a7640000"

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValueError):
            Decimal("-1")
        with pytest.raises(ValueError):
            Decimal.from_raw(-1)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            Decimal("abc")
        with pytest.raises(ValueError):
            Decimal("inf")

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            Decimal(True)


class TestArithmetic:
    def test_add_sub(self) -> None:
        assert Decimal("1.25") + "0.75" == 2
        assert Decimal(5) - Decimal(2) == 3
        assert 10 - Decimal(4) == 6

    def test_subtraction_below_zero_raises(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            Decimal(1) - Decimal(2)

    def test_multiplication_truncates(self) -> None:
        assert Decimal(2) * Decimal("0.5") == 1
        assert Decimal.from_raw(1) * Decimal("0.5") == Decimal.ZERO

    def test_division_truncates(self) -> None:
        assert str(Decimal(1) / 3) == "0.333333333333333333"
        assert str(Decimal(2) / 3) == "0.666666666666666666"

    def test_division_by_zero_is_infinite(self) -> None:
        result = Decimal(1) / 0
        assert result.infinite
        assert result.raw == MAX_UINT256
        assert result == Decimal.INFINITY

    def test_mul_div_keeps_precision(self) -> None:
        tiny = Decimal.from_raw(1)
        assert (tiny * "0.5") / "0.5" == Decimal.ZERO
        assert tiny.mul_div("0.5", "0.5") == tiny
        assert Decimal(1).mul_div(1, 0).infinite

    def test_pow(self) -> None:
        assert Decimal(2).pow(10) == 1024
        assert Decimal("0.5").pow(2) == Decimal("0.25")
        assert Decimal(7).pow(0) == Decimal.ONE

    def test_pow_rounds_half_up(self) -> None:
        # Squares of 1e-9, 7e-10 and 8e-10 are 1, 0.49 and 0.64 raw units.
        assert Decimal("0.000000001").pow(2).raw == 1
        assert Decimal("0.0000000007").pow(2).raw == 0
        assert Decimal("0.0000000008").pow(2).raw == 1

    def test_pow_rejects_negative_exponent(self) -> None:
        with pytest.raises(ValueError):
            Decimal(2).pow(-1)


class TestComparison:
    def test_equality_across_types(self) -> None:
        assert Decimal("1.0") == 1
        assert Decimal("1.0") == "1"
        assert hash(Decimal("1.0")) == hash(Decimal(1))

    def test_unparseable_is_not_equal(self) -> None:
        assert Decimal(1) != "abc"
        assert Decimal(1) != None  # noqa: E711

    def test_ordering(self) -> None:
        values = [Decimal(3), Decimal("0.5"), Decimal.INFINITY, Decimal.ZERO]
        assert sorted(values) == [Decimal.ZERO, Decimal("0.5"), Decimal(3), Decimal.INFINITY]
        assert Decimal("1.1") > 1
        assert Decimal(1) <= "1"

    def test_truthiness(self) -> None:
        assert not Decimal.ZERO
        assert Decimal("0.000000000000000001")


class TestFormatting:
    def test_str_trims_zeros(self) -> None:
        assert str(Decimal("2.50")) == "2.5"
        assert str(Decimal(7)) == "7"
        assert repr(Decimal("2.5")) == "Decimal('2.5')"

    def test_str_infinity(self) -> None:
        assert str(Decimal.INFINITY) == "∞"
        assert Decimal.INFINITY.to_string(2) == "∞"
        assert Decimal.INFINITY.prettify() == "∞"

    def test_to_string_rounds_half_up(self) -> None:
        assert Decimal("1.2345").to_string(2) == "1.23"
        assert Decimal("1.235").to_string(2) == "1.24"
        assert Decimal("0.5").to_string(0) == "1"
        assert Decimal(2).to_string(3) == "2.000"

    def test_to_string_rejects_bad_precision(self) -> None:
        with pytest.raises(ValueError):
            Decimal(1).to_string(19)

    def test_prettify(self) -> None:
        assert Decimal("1234567.891").prettify() == "1,234,567.89"
        assert Decimal(1234).prettify(0) == "1,234"
        assert Decimal("0.5").prettify() == "0.50"
