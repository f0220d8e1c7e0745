"""Farthest-first ordering of a color set.

See https://en.wikipedia.org/wiki/Farthest-first_traversal
"""

import numpy as np
import numba

from .colorspace import colors_to_lab
from .delta_e import DistanceMetric, color_distance


@numba.jit(nopython=True)
def farthest_first_order(labs, metric, num_placed):
    """Permutation that places, at each position, the remaining color whose
    distance to its nearest already-placed color is largest.

    The first `num_placed` colors (at least one) keep their positions.
    """
    n = labs.shape[0]
    order = np.arange(n)
    start = max(num_placed, 1)
    if start >= n:
        return order

    # min_distances[j]: distance from order[j] to the closest placed color
    min_distances = np.full(n, np.inf)
    # The loop below folds in order[start - 1], fold the rest of the prefix here
    for p in range(start - 1):
        for j in range(start, n):
            d = color_distance(labs[order[j]], labs[order[p]], metric)
            if d < min_distances[j]:
                min_distances[j] = d

    for i in range(start, n):
        max_index = i
        max_distance = -1.0
        for j in range(i, n):
            d = color_distance(labs[order[j]], labs[order[i - 1]], metric)
            if d < min_distances[j]:
                min_distances[j] = d
            if min_distances[j] > max_distance:
                max_distance = min_distances[j]
                max_index = j

        tmp = order[i]
        order[i] = order[max_index]
        order[max_index] = tmp
        tmp_distance = min_distances[i]
        min_distances[i] = min_distances[max_index]
        min_distances[max_index] = tmp_distance

    return order


def rearrange_sequence(colors, distance_metric, num_fixed_colors=0):
    """Reorder colors so that every prefix of the sequence stays as distinct
    as possible. Only a heuristic, the tail of the sequence in particular is
    not optimal.
    """
    if len(colors) < 2:
        return list(colors)
    metric = DistanceMetric(distance_metric)
    order = farthest_first_order(colors_to_lab(colors), metric.value, num_fixed_colors)
    return [colors[i] for i in order]
