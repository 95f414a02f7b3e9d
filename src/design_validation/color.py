"""Perceptual color distance.

Parses CSS color strings and measures the perceptual difference between
two colors with CIEDE2000 in CIELAB space. Alpha is parsed but ignored
for distance.
"""

import math
import re

from PIL import ImageColor


class ColorParseError(ValueError):
    """Raised when a color string cannot be parsed."""

    pass


RGBA = tuple[int, int, int, float]

_NUMBER = r"[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?%?"
_RGB_FUNCTION = re.compile(
    rf"^rgba?\(\s*({_NUMBER})\s*[,\s]\s*({_NUMBER})\s*[,\s]\s*({_NUMBER})"
    rf"\s*(?:[,/]\s*({_NUMBER})\s*)?\)$",
    re.IGNORECASE,
)


def _parse_channel(token: str) -> int:
    if token.endswith("%"):
        value = float(token[:-1]) * 255 / 100
    else:
        value = float(token)
    return max(0, min(255, round(value)))


def _parse_alpha(token: str | None) -> float:
    if token is None:
        return 1.0
    if token.endswith("%"):
        value = float(token[:-1]) / 100
    else:
        value = float(token)
    return max(0.0, min(1.0, value))


def parse_color(value: str) -> RGBA:
    """Parse a CSS color into an (r, g, b, alpha) tuple.

    Alpha is a float in [0, 1]. Supports hex, ``rgb()``/``rgba()`` in comma
    or space syntax, ``transparent``, and anything Pillow's ``ImageColor``
    understands (named colors, ``hsl()``).

    Raises:
        ColorParseError: If the value is not a recognizable color.
    """
    if not isinstance(value, str) or not value.strip():
        raise ColorParseError(f"Invalid color: {value!r}")

    color = value.strip().lower()
    if color == "transparent":
        return (0, 0, 0, 0.0)

    match = _RGB_FUNCTION.match(color)
    if match:
        r, g, b, a = match.groups()
        return (_parse_channel(r), _parse_channel(g), _parse_channel(b), _parse_alpha(a))

    try:
        rgb = ImageColor.getrgb(color)
    except ValueError as e:
        raise ColorParseError(f"Invalid color: {value!r}") from e

    if len(rgb) == 4:
        return (rgb[0], rgb[1], rgb[2], rgb[3] / 255)
    return (rgb[0], rgb[1], rgb[2], 1.0)


def is_transparent(value: str) -> bool:
    """Check whether a color is fully transparent. Unparseable is not."""
    try:
        return parse_color(value)[3] == 0
    except ColorParseError:
        return False


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB to an uppercase hex string."""
    return f"#{r:02X}{g:02X}{b:02X}"


def rgb_to_lab(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert sRGB to CIELAB (D65 white point)."""
    def linearize(c: float) -> float:
        c = c / 255.0
        return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92

    r_lin = linearize(r)
    g_lin = linearize(g)
    b_lin = linearize(b)

    x = r_lin * 0.4124564 + g_lin * 0.3575761 + b_lin * 0.1804375
    y = r_lin * 0.2126729 + g_lin * 0.7151522 + b_lin * 0.0721750
    z = r_lin * 0.0193339 + g_lin * 0.1191920 + b_lin * 0.9503041

    x_ref, y_ref, z_ref = 0.95047, 1.0, 1.08883

    def f(t: float) -> float:
        return t ** (1 / 3) if t > 0.008856 else (7.787 * t) + (16 / 116)

    fx, fy, fz = f(x / x_ref), f(y / y_ref), f(z / z_ref)
    return (116 * fy) - 16, 500 * (fx - fy), 200 * (fy - fz)


def delta_e_2000(
    lab1: tuple[float, float, float],
    lab2: tuple[float, float, float],
) -> float:
    """Calculate the CIEDE2000 color difference between two LAB colors."""
    l1, a1, b1 = lab1
    l2, a2, b2 = lab2

    c1 = math.hypot(a1, b1)
    c2 = math.hypot(a2, b2)
    c_bar7 = ((c1 + c2) / 2) ** 7
    g = 0.5 * (1 - math.sqrt(c_bar7 / (c_bar7 + 25 ** 7)))

    a1p = a1 * (1 + g)
    a2p = a2 * (1 + g)
    c1p = math.hypot(a1p, b1)
    c2p = math.hypot(a2p, b2)

    h1p = math.degrees(math.atan2(b1, a1p)) % 360 if c1p else 0.0
    h2p = math.degrees(math.atan2(b2, a2p)) % 360 if c2p else 0.0

    dl = l2 - l1
    dc = c2p - c1p

    if c1p * c2p == 0:
        dh = 0.0
    elif abs(h2p - h1p) <= 180:
        dh = h2p - h1p
    elif h2p - h1p > 180:
        dh = h2p - h1p - 360
    else:
        dh = h2p - h1p + 360
    dH = 2 * math.sqrt(c1p * c2p) * math.sin(math.radians(dh / 2))

    l_bar = (l1 + l2) / 2
    c_bar_p = (c1p + c2p) / 2

    if c1p * c2p == 0:
        h_bar = h1p + h2p
    elif abs(h1p - h2p) <= 180:
        h_bar = (h1p + h2p) / 2
    elif h1p + h2p < 360:
        h_bar = (h1p + h2p + 360) / 2
    else:
        h_bar = (h1p + h2p - 360) / 2

    t = (
        1
        - 0.17 * math.cos(math.radians(h_bar - 30))
        + 0.24 * math.cos(math.radians(2 * h_bar))
        + 0.32 * math.cos(math.radians(3 * h_bar + 6))
        - 0.20 * math.cos(math.radians(4 * h_bar - 63))
    )

    s_l = 1 + (0.015 * (l_bar - 50) ** 2) / math.sqrt(20 + (l_bar - 50) ** 2)
    s_c = 1 + 0.045 * c_bar_p
    s_h = 1 + 0.015 * c_bar_p * t

    c_bar_p7 = c_bar_p ** 7
    r_c = 2 * math.sqrt(c_bar_p7 / (c_bar_p7 + 25 ** 7))
    d_theta = 30 * math.exp(-(((h_bar - 275) / 25) ** 2))
    r_t = -math.sin(math.radians(2 * d_theta)) * r_c

    dl_term = dl / s_l
    dc_term = dc / s_c
    dh_term = dH / s_h

    return math.sqrt(dl_term ** 2 + dc_term ** 2 + dh_term ** 2 + r_t * dc_term * dh_term)


def color_distance(color_a: str, color_b: str) -> float:
    """Perceptual distance between two CSS colors (CIEDE2000).

    Raises:
        ColorParseError: If either color cannot be parsed.
    """
    r1, g1, b1, _ = parse_color(color_a)
    r2, g2, b2, _ = parse_color(color_b)
    if (r1, g1, b1) == (r2, g2, b2):
        return 0.0
    return delta_e_2000(rgb_to_lab(r1, g1, b1), rgb_to_lab(r2, g2, b2))
