"""Incrementally maintained nearest-neighbor distances of a color set."""

import numpy as np
import numba

from .delta_e import DistanceMetric, color_distance


@numba.jit(nopython=True)
def nearest_neighbor(labs, index, metric):
    """Scan all other colors for the one closest to `labs[index]`.

    Returns (distance, neighbor index). Ties go to the lower index.
    """
    best_distance = np.inf
    best_index = -1
    for j in range(labs.shape[0]):
        if j == index:
            continue
        d = color_distance(labs[index], labs[j], metric)
        if d < best_distance:
            best_distance = d
            best_index = j
    return best_distance, best_index


@numba.jit(nopython=True)
def build_closest_distances(labs, metric):
    n = labs.shape[0]
    closest_distances = np.empty(n, dtype=np.float64)
    closest_indices = np.empty(n, dtype=np.int64)
    for i in range(n):
        d, j = nearest_neighbor(labs, i, metric)
        closest_distances[i] = d
        closest_indices[i] = j
    return closest_distances, closest_indices


@numba.jit(nopython=True)
def update_closest_distances(labs, closest_distances, closest_indices, changed, metric):
    """Repair the cache in place after `labs[changed]` moved."""
    n = labs.shape[0]
    stale = np.empty(n, dtype=np.int64)
    num_stale = 0

    best_distance = np.inf
    best_index = -1
    for i in range(n):
        if i == changed:
            continue

        d = color_distance(labs[i], labs[changed], metric)
        if d < best_distance:
            best_distance = d
            best_index = i

        if d < closest_distances[i]:
            closest_distances[i] = d
            closest_indices[i] = changed
        elif closest_indices[i] == changed:
            # The moved color was the nearest neighbor but may not be anymore
            stale[num_stale] = i
            num_stale += 1

    closest_distances[changed] = best_distance
    closest_indices[changed] = best_index

    # Only `changed` moved, so rescanning a stale entry cannot invalidate others
    for s in range(num_stale):
        i = stale[s]
        d, j = nearest_neighbor(labs, i, metric)
        closest_distances[i] = d
        closest_indices[i] = j


@numba.jit(nopython=True)
def summarize_closest_distances(closest_distances, closest_indices, num_fixed):
    """Mean over non-fixed entries; minimum and closest pair over pairs with a non-fixed end."""
    total = 0.0
    count = 0
    min_distance = np.inf
    pair_i = -1
    pair_j = -1

    for i in range(closest_distances.shape[0]):
        j = closest_indices[i]
        if i >= num_fixed:
            total += closest_distances[i]
            count += 1
        elif j < num_fixed:
            continue

        if closest_distances[i] < min_distance:
            min_distance = closest_distances[i]
            pair_i = i
            pair_j = j

    mean_distance = 0.0
    if count > 0:
        mean_distance = total / count
    return mean_distance, min_distance, pair_i, pair_j


class DistanceResult:
    """Nearest-neighbor cache of a color set plus its aggregate statistics.

    `closest_distances[i]` / `closest_indices[i]` hold the distance to, and
    the index of, the color closest to color `i`. Pairs of two fixed colors
    never count towards the minimum: they cannot be improved upon.
    """

    def __init__(self, closest_distances, closest_indices, distance_metric, num_fixed_colors=0):
        self.closest_distances = closest_distances
        self.closest_indices = closest_indices
        self.distance_metric = DistanceMetric(distance_metric)
        self.num_fixed_colors = num_fixed_colors
        self.mean_closest_distance = 0.0
        self.min_closest_distance = np.inf
        self.closest_pair = None
        self._update_totals()

    @classmethod
    def from_labs(cls, labs, distance_metric, num_fixed_colors=0):
        metric = DistanceMetric(distance_metric)
        closest_distances, closest_indices = build_closest_distances(labs, metric.value)
        return cls(closest_distances, closest_indices, metric, num_fixed_colors)

    def update(self, labs, changed_color):
        """A new result for `labs`, where only `changed_color` differs from the
        coordinates this result was computed for. `self` is left untouched."""
        result = self.copy()
        update_closest_distances(
            labs,
            result.closest_distances,
            result.closest_indices,
            changed_color,
            self.distance_metric.value,
        )
        result._update_totals()
        return result

    def copy(self):
        return DistanceResult(
            self.closest_distances.copy(),
            self.closest_indices.copy(),
            self.distance_metric,
            self.num_fixed_colors,
        )

    def _update_totals(self):
        mean_distance, min_distance, pair_i, pair_j = summarize_closest_distances(
            self.closest_distances, self.closest_indices, self.num_fixed_colors
        )
        self.mean_closest_distance = float(mean_distance)
        self.min_closest_distance = float(min_distance)
        self.closest_pair = (int(pair_i), int(pair_j)) if pair_i >= 0 else None

    def __repr__(self):
        return (
            f"DistanceResult(mean={self.mean_closest_distance:.4f}, "
            f"min={self.min_closest_distance:.4f}, pair={self.closest_pair})"
        )
