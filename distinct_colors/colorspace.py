"""sRGB colors and their CIE Lab coordinates."""

import math
import re
from collections import namedtuple

import numpy as np
import numba

# Illuminant D65 reference white
D65_XN = 0.950470
D65_YN = 1.0
D65_ZN = 1.088830

Lab = namedtuple("Lab", ["l", "a", "b", "alpha"])


@numba.jit(nopython=True)
def rgb_to_lab(rgb):
    """Convert 8-bit sRGB rows (N, 3) to CIE Lab rows (N, 3)."""
    n = rgb.shape[0]
    lab = np.empty((n, 3), dtype=np.float64)
    cut = (6.0 / 29.0) ** 3

    for i in range(n):
        linear = np.empty(3, dtype=np.float64)
        for j in range(3):
            c = rgb[i, j] / 255.0
            if c <= 0.04045:
                linear[j] = c / 12.92
            else:
                linear[j] = ((c + 0.055) / 1.055) ** 2.4

        x = 0.4124 * linear[0] + 0.3576 * linear[1] + 0.1805 * linear[2]
        y = 0.2126 * linear[0] + 0.7152 * linear[1] + 0.0722 * linear[2]
        z = 0.0193 * linear[0] + 0.1192 * linear[1] + 0.9505 * linear[2]

        f = np.empty(3, dtype=np.float64)
        t = np.array((x / D65_XN, y / D65_YN, z / D65_ZN))
        for j in range(3):
            if t[j] > cut:
                f[j] = t[j] ** (1.0 / 3.0)
            else:
                f[j] = (1.0 / 3.0) * (29.0 / 6.0) ** 2 * t[j] + 4.0 / 29.0

        lab[i, 0] = 116.0 * f[1] - 16.0
        lab[i, 1] = 500.0 * (f[0] - f[1])
        lab[i, 2] = 200.0 * (f[1] - f[2])
    return lab


_HEX_PATTERN = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_GRAY_PATTERN = re.compile(r"^gray\(\s*([0-9]*\.?[0-9]+)\s*\)$")


class Color(namedtuple("Color", ["r", "g", "b", "alpha"])):
    """An opaque sRGB color with 8-bit channels.

    Two colors compare equal when their integer channels (and alpha) match.
    """

    __slots__ = ()

    def __new__(cls, r, g, b, alpha=1.0):
        return super().__new__(cls, int(r), int(g), int(b), float(alpha))

    @classmethod
    def from_rgb(cls, r, g, b):
        return cls(min(max(r, 0), 255), min(max(g, 0), 255), min(max(b, 0), 255))

    @classmethod
    def graytone(cls, lightness):
        """Gray from a lightness value (0.0 is black, 1.0 is white)."""
        value = int(math.floor(255.0 * min(max(lightness, 0.0), 1.0) + 0.5))
        return cls(value, value, value)

    @classmethod
    def white(cls):
        return cls(255, 255, 255)

    @classmethod
    def black(cls):
        return cls(0, 0, 0)

    @classmethod
    def parse(cls, text):
        """Parse `#rgb`, `#rrggbb`, `gray(x)`, `white` or `black`.

        Raises ValueError if the text is not a color.
        """
        text = text.strip()
        lowered = text.lower()
        if lowered == "white":
            return cls.white()
        if lowered == "black":
            return cls.black()

        match = _GRAY_PATTERN.match(lowered)
        if match:
            return cls.graytone(float(match.group(1)))

        match = _HEX_PATTERN.match(text)
        if not match:
            raise ValueError(f"Could not parse color '{text}'")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def to_rgb_array(self):
        return np.array([self.r, self.g, self.b], dtype=np.int64)

    def to_lab(self):
        l, a, b = rgb_to_lab(self.to_rgb_array().reshape(1, 3))[0]
        return Lab(l, a, b, self.alpha)

    def to_hex(self):
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def __str__(self):
        return self.to_hex()


def colors_to_lab(colors):
    """Lab coordinates of a list of colors as an (N, 3) array."""
    if len(colors) == 0:
        return np.empty((0, 3), dtype=np.float64)
    rgb = np.array([[c.r, c.g, c.b] for c in colors], dtype=np.int64)
    return rgb_to_lab(rgb)
