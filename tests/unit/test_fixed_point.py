"""
Unit tests for FixedPoint.

Verifies:
- Exact parsing at 18 decimals
- Float constructor prohibition
- Floor truncation on every product and quotient
- Non-negativity
"""

from decimal import Decimal

import pytest

from nfr_kernel.domain.fixed_point import (
    ONE,
    SCALE,
    ZERO,
    FixedPoint,
    fixed_sum,
)


class TestFixedPointParsing:
    """Tests for FixedPoint.of."""

    def test_simple_fraction(self):
        """Test parsing a simple decimal fraction."""
        assert FixedPoint.of("0.16").raw == 160_000_000_000_000_000

    def test_integer(self):
        """Test parsing an integer."""
        assert FixedPoint.of(5).raw == 5 * SCALE

    def test_decimal(self):
        """Test parsing a Decimal."""
        assert FixedPoint.of(Decimal("1.19")).raw == 1_190_000_000_000_000_000

    def test_smallest_unit(self):
        """Test the smallest representable unit is one raw unit."""
        assert FixedPoint.of("0.000000000000000001").raw == 1

    def test_large_value_is_exact(self):
        """Test large values keep every digit."""
        value = FixedPoint.of("123456789012345678901234567890.123456789012345678")
        assert str(value) == "123456789012345678901234567890.123456789012345678"

    def test_float_rejected(self):
        """Test floats are rejected."""
        with pytest.raises(TypeError):
            FixedPoint.of(0.16)

    def test_bool_rejected(self):
        """Test booleans are rejected."""
        with pytest.raises(TypeError):
            FixedPoint.of(True)

    def test_negative_rejected(self):
        """Test negative amounts are rejected."""
        with pytest.raises(ValueError):
            FixedPoint.of("-1")

    def test_too_many_decimals_rejected(self):
        """Test more than 18 decimals are rejected."""
        with pytest.raises(ValueError):
            FixedPoint.of("0.0000000000000000001")

    def test_garbage_rejected(self):
        """Test non-numeric text is rejected."""
        with pytest.raises(ValueError):
            FixedPoint.of("not a number")

    def test_infinity_rejected(self):
        """Test infinity is rejected."""
        with pytest.raises(ValueError):
            FixedPoint.of("Infinity")

    def test_of_is_identity_on_fixed_point(self):
        """Test of() returns an existing FixedPoint unchanged."""
        value = FixedPoint.of("2.5")
        assert FixedPoint.of(value) is value

    def test_raw_must_be_int(self):
        """Test from_raw requires an int."""
        with pytest.raises(TypeError):
            FixedPoint(raw=1.0)


class TestFixedPointArithmetic:
    """Truncating arithmetic."""

    def test_mul_exact(self):
        """Test exact multiplication."""
        assert FixedPoint.of("0.5").mul(FixedPoint.of("0.16")) == FixedPoint.of("0.08")

    def test_mul_truncates(self):
        """Test multiplication floors to the smallest unit."""
        tiny = FixedPoint.from_raw(1)
        assert tiny.mul(FixedPoint.of("0.5")) == ZERO

    def test_div_truncates(self):
        """Test division floors to the smallest unit."""
        third = ONE.div(FixedPoint.of(3))
        assert third.raw == 333_333_333_333_333_333

    def test_div_by_zero(self):
        """Test division by zero raises."""
        with pytest.raises(ZeroDivisionError):
            ONE.div(ZERO)

    def test_mul_div_single_truncation(self):
        """Test mul_div truncates once, not twice."""
        # floor(1 * 2 / 3) at 18 decimals
        assert ONE.mul_div(FixedPoint.of(2), FixedPoint.of(3)).raw == 666_666_666_666_666_666

    def test_mul_div_by_zero(self):
        """Test mul_div by zero raises."""
        with pytest.raises(ZeroDivisionError):
            ONE.mul_div(ONE, ZERO)

    def test_saturating_sub_floors_at_zero(self):
        """Test saturating_sub never goes below zero."""
        assert FixedPoint.of("0.5").saturating_sub(ONE) == ZERO
        assert FixedPoint.of("1.5").saturating_sub(ONE) == FixedPoint.of("0.5")

    def test_sub_underflow_raises(self):
        """Test plain subtraction below zero raises."""
        with pytest.raises(ValueError):
            FixedPoint.of("0.5") - ONE

    def test_add(self):
        """Test addition."""
        assert FixedPoint.of("0.84") + FixedPoint.of("0.16") == ONE

    def test_ordering(self):
        """Test comparison operators."""
        assert FixedPoint.of("0.16") < FixedPoint.of("1.19")
        assert ONE >= FixedPoint.of("1")
        assert max(FixedPoint.of("2"), ONE) == FixedPoint.of(2)

    def test_fixed_sum(self):
        """Test fixed_sum adds a sequence."""
        values = [FixedPoint.of("0.1"), FixedPoint.of("0.2"), FixedPoint.of("0.3")]
        assert fixed_sum(values) == FixedPoint.of("0.6")
        assert fixed_sum([]) == ZERO


class TestFixedPointRendering:
    def test_str_trims_trailing_zeros(self):
        """Test str() drops trailing zeros."""
        assert str(FixedPoint.of("0.160")) == "0.16"
        assert str(ONE) == "1"
        assert str(ZERO) == "0"

    def test_repr(self):
        """Test repr()."""
        assert repr(FixedPoint.of("5.5")) == "FixedPoint('5.5')"

    def test_to_decimal_round_trip(self):
        """Test conversion to Decimal is exact."""
        value = FixedPoint.of("0.879000000000000001")
        assert value.to_decimal() == Decimal("0.879000000000000001")

    def test_hashable(self):
        """Test equal values hash equally."""
        assert len({FixedPoint.of("1"), ONE, FixedPoint.from_raw(SCALE)}) == 1
