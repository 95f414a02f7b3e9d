"""Tests for design_validation/color.py."""

import pytest

from src.design_validation.color import (
    ColorParseError,
    color_distance,
    delta_e_2000,
    is_transparent,
    parse_color,
    rgb_to_hex,
    rgb_to_lab,
)


class TestParseColor:
    """Tests for CSS color parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("#FF0000", (255, 0, 0, 1.0)),
            ("#f00", (255, 0, 0, 1.0)),
            ("rgb(0, 128, 255)", (0, 128, 255, 1.0)),
            ("rgba(0, 128, 255, 0.5)", (0, 128, 255, 0.5)),
            ("rgb(0 128 255 / 50%)", (0, 128, 255, 0.5)),
            ("rgb(100%, 0%, 0%)", (255, 0, 0, 1.0)),
            ("white", (255, 255, 255, 1.0)),
            ("transparent", (0, 0, 0, 0.0)),
        ],
    )
    def test_valid_colors(self, value, expected):
        assert parse_color(value) == expected

    def test_hsl(self):
        r, g, b, a = parse_color("hsl(120, 100%, 50%)")
        assert (r, g, b, a) == (0, 255, 0, 1.0)

    @pytest.mark.parametrize("value", ["", "not-a-color", "#GGGGGG", "rgb(1, 2)"])
    def test_invalid_colors(self, value):
        with pytest.raises(ColorParseError):
            parse_color(value)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_color("nope")


class TestTransparency:
    """Tests for is_transparent."""

    def test_transparent_keyword(self):
        assert is_transparent("transparent")

    def test_zero_alpha(self):
        assert is_transparent("rgba(0, 0, 0, 0)")

    def test_opaque(self):
        assert not is_transparent("rgb(0, 0, 0)")

    def test_unparseable_is_not_transparent(self):
        assert not is_transparent("garbage")


class TestConversions:
    """Tests for hex and LAB conversion helpers."""

    def test_rgb_to_hex_uppercase(self):
        assert rgb_to_hex(171, 205, 239) == "#ABCDEF"

    def test_rgb_to_lab_white(self):
        l, a, b = rgb_to_lab(255, 255, 255)
        assert l == pytest.approx(100, abs=0.1)
        assert a == pytest.approx(0, abs=0.1)
        assert b == pytest.approx(0, abs=0.1)

    def test_rgb_to_lab_black(self):
        l, _, _ = rgb_to_lab(0, 0, 0)
        assert l == pytest.approx(0, abs=0.1)


class TestDeltaE2000:
    """Tests for the CIEDE2000 formula."""

    def test_reference_pair(self):
        """Test against a published CIEDE2000 reference pair."""
        lab1 = (50.0, 2.6772, -79.7751)
        lab2 = (50.0, 0.0, -82.7485)
        assert delta_e_2000(lab1, lab2) == pytest.approx(2.0425, abs=1e-3)

    def test_identical_is_zero(self):
        lab = (53.2, 80.1, 67.2)
        assert delta_e_2000(lab, lab) == pytest.approx(0.0)


class TestColorDistance:
    """Tests for color_distance."""

    def test_identical_colors(self):
        assert color_distance("#FF0000", "rgb(255, 0, 0)") == 0.0

    def test_alpha_ignored(self):
        assert color_distance("rgba(255, 0, 0, 0.2)", "#FF0000") == 0.0

    def test_symmetric(self):
        forward = color_distance("#3366CC", "#CC6633")
        backward = color_distance("#CC6633", "#3366CC")
        assert forward == pytest.approx(backward)

    def test_red_green_far_apart(self):
        assert color_distance("rgb(255, 0, 0)", "#00FF00") > 20

    def test_near_colors_small_distance(self):
        assert color_distance("#333333", "#343434") < 1

    def test_invalid_color_raises(self):
        with pytest.raises(ColorParseError):
            color_distance("#FF0000", "bogus")
