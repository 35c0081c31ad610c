"""Tests for color utilities."""

import pytest

from clipanimate.common import (
    Color,
    WHITE,
    parse_hex_color,
    resolve_color,
)


class TestParseHexColor:
    def test_with_hash(self):
        assert parse_hex_color("#1A1A1A") == (26, 26, 26, 255)

    def test_without_hash(self):
        assert parse_hex_color("FF0000") == (255, 0, 0, 255)

    def test_with_alpha(self):
        assert parse_hex_color("#DA003700") == (218, 0, 55, 0)

    def test_invalid_raises(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            parse_hex_color("#12345")


class TestColor:
    def test_rgb8(self):
        assert Color.rgb8(255, 0, 0) == (1.0, 0.0, 0.0, 1.0)

    def test_rgba8(self):
        assert Color.rgba8(0, 0, 255, 0) == (0.0, 0.0, 1.0, 0.0)

    def test_from_hex(self):
        assert Color.from_hex("#FFFFFF") == WHITE

    def test_to_rgba8_round_trips_bytes(self):
        assert Color.rgba8(218, 0, 55, 128).to_rgba8() == (218, 0, 55, 128)

    def test_to_rgba8_clamps(self):
        assert Color(1.3, -0.2, 0.5, 1.0).to_rgba8() == (255, 0, 128, 255)


class TestResolveColor:
    PALETTE = {"accent": Color.rgb8(177, 19, 77)}

    def test_palette_key(self):
        assert resolve_color("accent", self.PALETTE) == Color.rgb8(177, 19, 77)

    def test_inline_hex(self):
        assert resolve_color("#00FF00", self.PALETTE) == Color.rgb8(0, 255, 0)

    def test_byte_list(self):
        assert resolve_color([0, 0, 255], self.PALETTE) == Color.rgb8(0, 0, 255)

    def test_byte_list_with_alpha(self):
        assert resolve_color([0, 0, 255, 0], self.PALETTE).a == 0.0

    def test_color_passes_through(self):
        assert resolve_color(WHITE, {}) is WHITE

    def test_unknown_name_raises(self):
        with pytest.raises(ValueError, match="Unknown color"):
            resolve_color("nope", self.PALETTE)

    def test_out_of_range_list_raises(self):
        with pytest.raises(ValueError, match="Unknown color"):
            resolve_color([300, 0, 0], self.PALETTE)
