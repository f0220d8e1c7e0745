"""Simulated annealing of a color set towards maximal perceptual separation."""

import math
from enum import Enum

import numpy as np

from .colorspace import colors_to_lab
from .delta_e import DistanceMetric
from .neighbors import DistanceResult
from .sequence import rearrange_sequence
from .strategies import UniformRGB

# Progress snapshot and cooling periods, in iterations
CALLBACK_INTERVAL = 5_000
COOLING_INTERVAL = 1_000

# Local moves shift each RGB channel by up to this much
MAX_CHANNEL_STEP = 9


class OptimizationTarget(Enum):
    MEAN = "mean"
    MIN = "min"


class OptimizationMode(Enum):
    GLOBAL = "global"
    LOCAL = "local"


class SimulationParameters:
    def __init__(
        self,
        initial_temperature,
        cooling_rate,
        num_iterations,
        opt_target=OptimizationTarget.MEAN,
        opt_mode=OptimizationMode.GLOBAL,
        distance_metric=DistanceMetric.CIE76,
        num_fixed_colors=0,
    ):
        self.initial_temperature = initial_temperature
        self.cooling_rate = cooling_rate
        self.num_iterations = num_iterations
        self.opt_target = OptimizationTarget(opt_target)
        self.opt_mode = OptimizationMode(opt_mode)
        self.distance_metric = DistanceMetric(distance_metric)
        self.num_fixed_colors = num_fixed_colors


class IterationStatistics:
    """Progress snapshot handed to the observer. Holds copies only."""

    def __init__(self, iteration, temperature, distance_result, colors):
        self.iteration = iteration
        self.temperature = temperature
        self.distance_result = distance_result
        self.colors = colors


def score(result, target):
    if target == OptimizationTarget.MEAN:
        return result.mean_closest_distance
    return result.min_closest_distance


def acceptance_probability(current_score, new_score, temperature):
    """Metropolis criterion for a move that does not strictly improve the score."""
    if temperature <= 0.0:
        return 0.0
    return math.exp(-(current_score - new_score) / temperature)


def modify_channel(value, rng):
    step = int(rng.integers(0, MAX_CHANNEL_STEP + 1))
    if rng.integers(0, 2):
        return min(value + step, 255)
    return max(value - step, 0)


class SimulatedAnnealing:
    """Owns a working color set and anneals it in place.

    The first `parameters.num_fixed_colors` colors are never perturbed but
    still count as neighbors. `run` can be called repeatedly with different
    parameters; each call starts from the colors the previous one left.
    """

    def __init__(self, initial_colors, rng=None, strategy=None):
        self.colors = list(initial_colors)
        self.labs = colors_to_lab(self.colors)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.strategy = strategy if strategy is not None else UniformRGB()
        self.temperature = None

    def get_colors(self):
        return list(self.colors)

    def _pick_index(self, result, parameters):
        num_fixed = parameters.num_fixed_colors
        if parameters.opt_target == OptimizationTarget.MEAN:
            return int(self.rng.integers(num_fixed, len(self.colors)))

        first, second = result.closest_pair
        # A pair of two fixed colors never becomes the closest pair
        if first < num_fixed:
            return second
        if second < num_fixed:
            return first
        return first if self.rng.integers(0, 2) else second

    def _modify_color(self, color, parameters):
        if parameters.opt_mode == OptimizationMode.LOCAL:
            return type(color)(
                modify_channel(color.r, self.rng),
                modify_channel(color.g, self.rng),
                modify_channel(color.b, self.rng),
                color.alpha,
            )
        return self.strategy.generate(self.rng)

    def _accept(self, current_score, new_score):
        if new_score > current_score:
            return True
        # Ties are not improvements and go through the Metropolis test
        boltzmann = acceptance_probability(current_score, new_score, self.temperature)
        return self.rng.random() <= boltzmann

    def run(self, parameters, callback=None):
        """Anneal for `parameters.num_iterations` iterations.

        `callback` receives an `IterationStatistics` every CALLBACK_INTERVAL
        iterations, synchronously. Returns the `DistanceResult` of the best
        state seen for the current target; the optimizer is left in that state.
        """
        num_fixed = parameters.num_fixed_colors
        assert num_fixed <= len(self.colors)

        self.temperature = parameters.initial_temperature
        result = DistanceResult.from_labs(self.labs, parameters.distance_metric, num_fixed)

        if num_fixed == len(self.colors):
            return result

        target = parameters.opt_target
        current_score = score(result, target)

        best_score = current_score
        best_result = result
        best_colors = list(self.colors)
        best_labs = self.labs.copy()

        for iteration in range(parameters.num_iterations):
            index = self._pick_index(result, parameters)

            # Save old state
            old_color = self.colors[index]
            old_lab = self.labs[index].copy()

            candidate = self._modify_color(old_color, parameters)
            self.colors[index] = candidate
            self.labs[index] = colors_to_lab([candidate])[0]

            new_result = result.update(self.labs, index)
            new_score = score(new_result, target)

            if self._accept(current_score, new_score):
                result = new_result
                current_score = new_score

                if current_score > best_score:
                    best_score = current_score
                    best_result = result
                    best_colors = list(self.colors)
                    best_labs = self.labs.copy()
            else:
                # Revert
                self.colors[index] = old_color
                self.labs[index] = old_lab

            if iteration % CALLBACK_INTERVAL == 0 and callback is not None:
                callback(IterationStatistics(
                    iteration, self.temperature, result.copy(), self.get_colors()
                ))

            if iteration % COOLING_INTERVAL == 0:
                self.temperature *= parameters.cooling_rate

        self.colors = best_colors
        self.labs = best_labs
        return best_result


def distinct_colors(
    count,
    distance_metric=DistanceMetric.CIE76,
    fixed_colors=(),
    callback=None,
    rng=None,
    global_iterations=200_000,
    local_iterations=1_000_000,
):
    """Generate `count` visually distinct colors.

    The first `len(fixed_colors)` entries of the result are `fixed_colors`,
    unchanged. Returns `(colors, distance_result)`.
    """
    assert count > 1
    assert len(fixed_colors) <= count

    rng = rng if rng is not None else np.random.default_rng()
    strategy = UniformRGB()
    num_fixed_colors = len(fixed_colors)

    colors = list(fixed_colors)
    for _ in range(num_fixed_colors, count):
        colors.append(strategy.generate(rng))

    annealing = SimulatedAnnealing(colors, rng=rng, strategy=strategy)

    # Phase 1 explores broadly: random resampling, maximize the mean distance.
    global_phase = SimulationParameters(
        initial_temperature=3.0,
        cooling_rate=0.95,
        num_iterations=global_iterations,
        opt_target=OptimizationTarget.MEAN,
        opt_mode=OptimizationMode.GLOBAL,
        distance_metric=distance_metric,
        num_fixed_colors=num_fixed_colors,
    )
    annealing.run(global_phase, callback)

    # Phase 2 polishes the closest pair with small local moves.
    local_phase = SimulationParameters(
        initial_temperature=0.5,
        cooling_rate=0.99,
        num_iterations=local_iterations,
        opt_target=OptimizationTarget.MIN,
        opt_mode=OptimizationMode.LOCAL,
        distance_metric=distance_metric,
        num_fixed_colors=num_fixed_colors,
    )
    annealing.run(local_phase, callback)

    colors = rearrange_sequence(annealing.get_colors(), distance_metric, num_fixed_colors)
    # Same set, so the same statistics, but with indices into the new order
    result = DistanceResult.from_labs(colors_to_lab(colors), distance_metric, num_fixed_colors)
    return colors, result
