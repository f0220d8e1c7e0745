"""Perceptual color differences in CIE Lab space.

Both metrics take two Lab triples (anything indexable with at least three
numbers: tuples, `Lab` values or rows of a float array) and return a
non-negative scalar.
"""

import math
from enum import Enum

import numba


class DistanceMetric(Enum):
    CIE76 = 0
    CIEDE2000 = 1


CIE76 = DistanceMetric.CIE76.value
CIEDE2000 = DistanceMetric.CIEDE2000.value

# 25^7, shared by the chroma correction and the rotation term
_POW25_7 = 6103515625.0


@numba.jit(nopython=True)
def cie76(lab1, lab2):
    """Euclidean distance in Lab space."""
    dl = float(lab1[0]) - float(lab2[0])
    da = float(lab1[1]) - float(lab2[1])
    db = float(lab1[2]) - float(lab2[2])
    return math.sqrt(dl * dl + da * da + db * db)


@numba.jit(nopython=True)
def _hue_angle(b, a_prime):
    # atan2(0, 0) is undefined, the hue of a neutral color is 0
    if b == 0.0 and a_prime == 0.0:
        return 0.0
    angle = math.atan2(b, a_prime) * (180.0 / math.pi)
    if angle < 0.0:
        angle += 360.0
    return angle


@numba.jit(nopython=True)
def _delta_hue(c1, c2, h1, h2):
    if c1 == 0.0 or c2 == 0.0:
        return 0.0
    if abs(h1 - h2) <= 180.0:
        return h2 - h1
    if h2 <= h1:
        return h2 - h1 + 360.0
    return h2 - h1 - 360.0


@numba.jit(nopython=True)
def _mean_hue(h1, h2):
    if abs(h1 - h2) > 180.0:
        return (h1 + h2 + 360.0) / 2.0
    return (h1 + h2) / 2.0


@numba.jit(nopython=True)
def ciede2000(lab1, lab2):
    """CIEDE2000 color difference with k_L = k_C = k_H = 1.

    See Sharma, Wu and Dalal, "The CIEDE2000 Color-Difference Formula:
    Implementation Notes, Supplementary Test Data, and Mathematical
    Observations" (2005).
    """
    l1, a1, b1 = float(lab1[0]), float(lab1[1]), float(lab1[2])
    l2, a2, b2 = float(lab2[0]), float(lab2[1]), float(lab2[2])

    delta_l_prime = l2 - l1
    l_bar = (l1 + l2) / 2.0

    c1 = math.sqrt(a1 * a1 + b1 * b1)
    c2 = math.sqrt(a2 * a2 + b2 * b2)
    c_bar7 = ((c1 + c2) / 2.0) ** 7

    # 0 at zero mean chroma, never NaN
    g = 1.0 - math.sqrt(c_bar7 / (c_bar7 + _POW25_7))
    a1_prime = a1 + (a1 / 2.0) * g
    a2_prime = a2 + (a2 / 2.0) * g

    c1_prime = math.sqrt(a1_prime * a1_prime + b1 * b1)
    c2_prime = math.sqrt(a2_prime * a2_prime + b2 * b2)
    c_bar_prime = (c1_prime + c2_prime) / 2.0
    delta_c_prime = c2_prime - c1_prime

    l_offset = (l_bar - 50.0) ** 2
    s_l = 1.0 + (0.015 * l_offset) / math.sqrt(20.0 + l_offset)
    s_c = 1.0 + 0.045 * c_bar_prime

    h1_prime = _hue_angle(b1, a1_prime)
    h2_prime = _hue_angle(b2, a2_prime)

    delta_h_prime = _delta_hue(c1, c2, h1_prime, h2_prime)
    delta_big_h_prime = (
        2.0 * math.sqrt(c1_prime * c2_prime) * math.sin(math.radians(delta_h_prime) / 2.0)
    )

    h_bar_prime = _mean_hue(h1_prime, h2_prime)
    t = (
        1.0
        - 0.17 * math.cos(math.radians(h_bar_prime - 30.0))
        + 0.24 * math.cos(math.radians(2.0 * h_bar_prime))
        + 0.32 * math.cos(math.radians(3.0 * h_bar_prime + 6.0))
        - 0.20 * math.cos(math.radians(4.0 * h_bar_prime - 63.0))
    )
    s_h = 1.0 + 0.015 * c_bar_prime * t

    c_bar_prime7 = c_bar_prime ** 7
    r_t = (
        -2.0
        * math.sqrt(c_bar_prime7 / (c_bar_prime7 + _POW25_7))
        * math.sin(math.radians(60.0 * math.exp(-(((h_bar_prime - 275.0) / 25.0) ** 2))))
    )

    lightness = delta_l_prime / s_l
    chroma = delta_c_prime / s_c
    hue = delta_big_h_prime / s_h

    return math.sqrt(lightness ** 2 + chroma ** 2 + hue ** 2 + r_t * chroma * hue)


@numba.jit(nopython=True)
def color_distance(lab1, lab2, metric):
    """Distance under the metric code (`DistanceMetric.value`)."""
    if metric == CIEDE2000:
        return ciede2000(lab1, lab2)
    return cie76(lab1, lab2)


def distance(lab1, lab2, metric):
    """Distance under a `DistanceMetric`."""
    return color_distance(lab1, lab2, DistanceMetric(metric).value)
