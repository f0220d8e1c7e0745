import numpy as np
import pytest

from distinct_colors.colorspace import Color, colors_to_lab
from distinct_colors.delta_e import DistanceMetric
from distinct_colors.neighbors import DistanceResult
from distinct_colors.optimizer import (
    OptimizationMode,
    OptimizationTarget,
    SimulatedAnnealing,
    SimulationParameters,
    acceptance_probability,
    distinct_colors,
    modify_channel,
)

FIXED = [Color(255, 0, 0), Color(0, 0, 255)]


def random_colors(rng, n):
    return [Color(*rng.integers(0, 256, size=3)) for _ in range(n)]


def rng_state(rng):
    return rng.bit_generator.state


def test_distinct_colors_is_deterministic():
    first = distinct_colors(
        6, rng=np.random.default_rng(42), global_iterations=3_000, local_iterations=6_000
    )
    second = distinct_colors(
        6, rng=np.random.default_rng(42), global_iterations=3_000, local_iterations=6_000
    )
    assert first[0] == second[0]
    assert first[1].min_closest_distance == second[1].min_closest_distance
    assert first[1].mean_closest_distance == second[1].mean_closest_distance
    assert first[1].closest_pair == second[1].closest_pair


@pytest.mark.parametrize("metric", list(DistanceMetric))
def test_distinct_colors_keeps_fixed_colors(metric):
    colors, result = distinct_colors(
        5,
        distance_metric=metric,
        fixed_colors=FIXED,
        rng=np.random.default_rng(0),
        global_iterations=2_000,
        local_iterations=2_000,
    )
    assert len(colors) == 5
    assert colors[:2] == FIXED
    assert result.num_fixed_colors == 2
    assert result.distance_metric == metric


def test_distinct_colors_spreads_colors():
    colors, result = distinct_colors(
        4, rng=np.random.default_rng(3), global_iterations=5_000, local_iterations=10_000
    )
    assert len(set(colors)) == 4
    # Four colors fit into the sRGB gamut far more than 20 CIE76 units apart
    assert result.min_closest_distance > 20.0

    labs = colors_to_lab(colors)
    i, j = result.closest_pair
    assert np.linalg.norm(labs[i] - labs[j]) == pytest.approx(result.min_closest_distance)


def test_distinct_colors_all_fixed_is_a_no_op():
    rng = np.random.default_rng(9)
    before = rng_state(rng)
    fixed = [Color.white(), Color.black(), Color(0, 255, 0)]
    colors, result = distinct_colors(3, fixed_colors=fixed, rng=rng)
    assert colors == fixed
    assert rng_state(rng) == before
    assert result.closest_pair is None


@pytest.mark.parametrize("count, fixed", [(1, []), (0, []), (2, FIXED + [Color.white()])])
def test_distinct_colors_rejects_invalid_arguments(count, fixed):
    with pytest.raises(AssertionError):
        distinct_colors(count, fixed_colors=fixed, rng=np.random.default_rng(0))


def test_run_without_free_colors_returns_input_statistics():
    rng = np.random.default_rng(11)
    colors = random_colors(rng, 4)
    before = rng_state(rng)
    annealing = SimulatedAnnealing(colors, rng=rng)
    parameters = SimulationParameters(3.0, 0.95, 10_000, num_fixed_colors=4)

    calls = []
    result = annealing.run(parameters, calls.append)

    expected = DistanceResult.from_labs(colors_to_lab(colors), DistanceMetric.CIE76, 4)
    np.testing.assert_array_equal(result.closest_distances, expected.closest_distances)
    assert result.mean_closest_distance == expected.mean_closest_distance
    assert annealing.get_colors() == colors
    assert rng_state(rng) == before
    assert calls == []


@pytest.mark.parametrize("mode", list(OptimizationMode))
@pytest.mark.parametrize("target", list(OptimizationTarget))
def test_run_never_touches_fixed_colors(mode, target):
    rng = np.random.default_rng(5)
    colors = FIXED + random_colors(rng, 4)
    annealing = SimulatedAnnealing(colors, rng=rng)
    parameters = SimulationParameters(
        1.0, 0.9, 3_000, opt_target=target, opt_mode=mode, num_fixed_colors=2
    )

    snapshots = []
    annealing.run(parameters, snapshots.append)

    assert annealing.get_colors()[:2] == FIXED
    assert all(s.colors[:2] == FIXED for s in snapshots)


def test_zero_temperature_min_score_never_decreases():
    rng = np.random.default_rng(2)
    annealing = SimulatedAnnealing(random_colors(rng, 6), rng=rng)
    parameters = SimulationParameters(
        0.0, 0.9, 30_000,
        opt_target=OptimizationTarget.MIN,
        opt_mode=OptimizationMode.LOCAL,
    )

    minima = []
    result = annealing.run(parameters, lambda s: minima.append(s.distance_result.min_closest_distance))

    assert len(minima) == 6
    assert minima == sorted(minima)
    assert result.min_closest_distance >= minima[-1]


def test_run_returns_state_it_leaves_behind():
    rng = np.random.default_rng(8)
    annealing = SimulatedAnnealing(random_colors(rng, 5), rng=rng)
    parameters = SimulationParameters(3.0, 0.95, 4_000)
    result = annealing.run(parameters)

    expected = DistanceResult.from_labs(colors_to_lab(annealing.get_colors()), DistanceMetric.CIE76)
    np.testing.assert_allclose(result.closest_distances, expected.closest_distances)
    assert result.mean_closest_distance == pytest.approx(expected.mean_closest_distance)


def test_run_reseeds_temperature_and_reports_progress():
    rng = np.random.default_rng(4)
    annealing = SimulatedAnnealing(random_colors(rng, 4), rng=rng)

    snapshots = []
    annealing.run(SimulationParameters(2.0, 0.5, 10_001), snapshots.append)
    assert [s.iteration for s in snapshots] == [0, 5_000, 10_000]
    assert snapshots[0].temperature == 2.0
    # Cooled at iterations 0, 1000, 2000, 3000 and 4000
    assert snapshots[1].temperature == pytest.approx(2.0 * 0.5 ** 5)

    snapshots.clear()
    annealing.run(SimulationParameters(0.25, 0.5, 1), snapshots.append)
    assert snapshots[0].temperature == 0.25


def test_snapshots_are_copies():
    rng = np.random.default_rng(6)
    annealing = SimulatedAnnealing(random_colors(rng, 4), rng=rng)

    def vandalize(stats):
        assert stats.colors is not annealing.colors
        stats.colors.clear()
        stats.distance_result.closest_distances[:] = -1.0

    result = annealing.run(SimulationParameters(1.0, 0.9, 3), vandalize)
    assert len(annealing.get_colors()) == 4
    assert (result.closest_distances >= 0.0).all()


def test_min_target_perturbs_free_end_of_closest_pair():
    colors = [Color(120, 120, 120), Color(122, 122, 122), Color.black(), Color.white()]
    annealing = SimulatedAnnealing(colors, rng=np.random.default_rng(0))
    parameters = SimulationParameters(
        1.0, 0.9, 1, opt_target=OptimizationTarget.MIN, num_fixed_colors=1
    )
    result = DistanceResult.from_labs(annealing.labs, DistanceMetric.CIE76, 1)
    assert result.closest_pair == (0, 1)
    for _ in range(20):
        assert annealing._pick_index(result, parameters) == 1


def test_mean_target_only_picks_free_colors():
    rng = np.random.default_rng(0)
    annealing = SimulatedAnnealing(random_colors(rng, 6), rng=rng)
    parameters = SimulationParameters(1.0, 0.9, 1, num_fixed_colors=4)
    result = DistanceResult.from_labs(annealing.labs, DistanceMetric.CIE76, 4)
    picks = {annealing._pick_index(result, parameters) for _ in range(100)}
    assert picks == {4, 5}


def test_strict_improvement_is_accepted_without_drawing():
    rng = np.random.default_rng(0)
    annealing = SimulatedAnnealing([Color.white(), Color.black()], rng=rng)
    annealing.temperature = 1.0
    before = rng_state(rng)
    assert annealing._accept(1.0, 1.5)
    assert rng_state(rng) == before


def test_acceptance_probability():
    assert acceptance_probability(2.0, 1.0, 0.0) == 0.0
    assert acceptance_probability(2.0, 2.0, 0.5) == 1.0
    assert acceptance_probability(2.0, 1.0, 1.0) == pytest.approx(np.exp(-1.0))


def test_modify_channel_stays_in_range():
    rng = np.random.default_rng(1)
    for value in (0, 3, 128, 250, 255):
        for _ in range(200):
            modified = modify_channel(value, rng)
            assert 0 <= modified <= 255
            assert abs(modified - value) <= 9
