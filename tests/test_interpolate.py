"""Tests for value interpolation."""

import pytest

from clipanimate.common import Color
from clipanimate.interpolate import lerp


class TestScalar:
    def test_midpoint(self):
        assert lerp(0.0, 100.0, 0.5) == 50.0

    def test_endpoints(self):
        assert lerp(3.0, 7.0, 0.0) == 3.0
        assert lerp(3.0, 7.0, 1.0) == 7.0

    def test_extrapolates_above_one(self):
        assert lerp(0.0, 10.0, 1.5) == 15.0

    def test_extrapolates_below_zero(self):
        assert lerp(0.0, 10.0, -0.5) == -5.0


class TestTuple:
    def test_componentwise(self):
        assert lerp((0.0, 0.0), (10.0, 20.0), 0.5) == (5.0, 10.0)

    def test_plain_tuple_stays_tuple(self):
        assert type(lerp((0.0, 0.0), (1.0, 1.0), 0.5)) is tuple

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError, match="different lengths"):
            lerp((0.0, 0.0), (1.0, 1.0, 1.0), 0.5)


class TestColor:
    def test_returns_color(self):
        result = lerp(Color(0.0, 0.0, 0.0, 0.0), Color(1.0, 1.0, 1.0, 1.0), 0.5)
        assert isinstance(result, Color)
        assert result == Color(0.5, 0.5, 0.5, 0.5)

    def test_alpha_is_interpolated(self):
        result = lerp(Color(1.0, 0.0, 0.0, 0.0), Color(1.0, 0.0, 0.0, 1.0), 0.25)
        assert result.a == 0.25

    def test_overshoot_is_not_clamped(self):
        result = lerp(Color(0.0, 0.0, 0.0, 1.0), Color(1.0, 0.0, 0.0, 1.0), 1.2)
        assert result.r == pytest.approx(1.2)


class TestCustomTypes:
    def test_delegates_to_lerp_method(self):
        class Angle:
            def __init__(self, deg):
                self.deg = deg

            def lerp(self, other, t):
                return Angle(self.deg + (other.deg - self.deg) * t)

        assert lerp(Angle(0), Angle(90), 0.5).deg == 45

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError, match="Cannot interpolate"):
            lerp("a", "b", 0.5)
