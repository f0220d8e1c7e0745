"""Command line interface: `distinct-colors [count] [colors ...]`."""

import argparse
import sys
import time

import numpy as np

from .colorspace import Color
from .delta_e import DistanceMetric
from .optimizer import distinct_colors


class ProgressPrinter:
    """Observer that prints annealing progress to stderr."""

    def __init__(self, phase_iterations, stream=None):
        self.phase_iterations = list(phase_iterations)
        self.total_iterations = sum(self.phase_iterations)
        self.stream = stream if stream is not None else sys.stderr
        self.phase = 0
        self.last_iteration = None
        self.start_time = time.time()

    def __call__(self, stats):
        # Iteration counters restart with every phase
        if self.last_iteration is not None and stats.iteration <= self.last_iteration:
            self.phase += 1
        self.last_iteration = stats.iteration
        current_iter = sum(self.phase_iterations[:self.phase]) + stats.iteration

        elapsed_time = time.time() - self.start_time
        if current_iter > 0 and elapsed_time > 0:
            iterations_per_sec = current_iter / elapsed_time
            remaining_iterations = max(self.total_iterations - current_iter, 0)
            eta_str = time.strftime("%H:%M:%S", time.gmtime(remaining_iterations / iterations_per_sec))
        else:
            iterations_per_sec = 0.0
            eta_str = "Calculating..."

        result = stats.distance_result
        progress = (current_iter / self.total_iterations) * 100 if self.total_iterations else 100.0
        pair = result.closest_pair or ()
        swatches = " ".join(
            f"[{c.to_hex()}]" if i in pair else c.to_hex()
            for i, c in enumerate(stats.colors)
        )
        try:
            print(
                f"Iter {current_iter}/{self.total_iterations} ({progress:.1f}%): "
                f"Temp={stats.temperature:.6f}, D_mean={result.mean_closest_distance:.2f}, "
                f"D_min={result.min_closest_distance:.2f} "
                f"Speed={iterations_per_sec:.2f} it/s ETA: {eta_str} {swatches}",
                file=self.stream,
            )
        except (BrokenPipeError, OSError):
            pass


def parse_colors(values):
    colors = []
    for value in values:
        try:
            colors.append(Color.parse(value))
        except ValueError:
            print(f"Error: Invalid color '{value}'", file=sys.stderr)
            sys.exit(1)
    return colors


def format_results(colors, result):
    output_lines = []
    output_lines.append("--- Statistics ---")
    output_lines.append(f"Mean Distance: {result.mean_closest_distance:.5f}")
    output_lines.append(f"Minimum Distance: {result.min_closest_distance:.5f}")

    output_lines.append("\n--- Final Colors ---")
    output_lines.append(f"{'Index':<6} {'Hex':<8} {'R,G,B':<14} {'L':<8} {'a':<8} {'b':<8}".rstrip())
    for i, color in enumerate(colors):
        lab = color.to_lab()
        rgb_str = f"{color.r},{color.g},{color.b}"
        output_lines.append(
            f"{i:<6} {color.to_hex():<8} {rgb_str:<14} {lab.l:<8.3f} {lab.a:<8.3f} {lab.b:<8.3f}".rstrip()
        )
    return "\n".join(output_lines)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="distinct-colors",
        description="Generate a set of visually distinct colors by maximizing the perceived "
                    "color difference between pairs of colors (simulated annealing). The "
                    "defaults work fine for up to 10-20 colors.",
    )
    parser.add_argument("count", nargs="?", type=int, default=10, help="Number of distinct colors in the set")
    parser.add_argument("colors", nargs="*", help="Fixed colors that are kept as the start of the set")
    parser.add_argument(
        "-m", "--metric",
        choices=[m.name for m in DistanceMetric],
        default=DistanceMetric.CIE76.name,
        help="Distance metric. CIEDE2000 is more accurate, but also much slower.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print simulation output to STDERR")
    parser.add_argument(
        "--print-minimal-distance", action="store_true", help="Only show the optimized minimal distance"
    )
    parser.add_argument("--seed", type=int, help="Random seed, for reproducible results")
    parser.add_argument("--global-iterations", type=int, default=200_000, help="Iterations of the global phase")
    parser.add_argument("--local-iterations", type=int, default=1_000_000, help="Iterations of the local phase")
    parser.add_argument("-o", "--output", help="Also write the results to this file")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.count < 2:
        parser.error("The number of colors must be larger than one")
    fixed_colors = parse_colors(args.colors)
    if len(fixed_colors) > args.count:
        parser.error("The number of fixed colors must not be larger than the number of colors")

    callback = None
    if args.verbose:
        callback = ProgressPrinter([args.global_iterations, args.local_iterations])

    try:
        colors, result = distinct_colors(
            args.count,
            distance_metric=DistanceMetric[args.metric],
            fixed_colors=fixed_colors,
            callback=callback,
            rng=np.random.default_rng(args.seed),
            global_iterations=args.global_iterations,
            local_iterations=args.local_iterations,
        )
    except KeyboardInterrupt:
        print("\nOptimization cancelled by user.", file=sys.stderr)
        return 0

    if args.print_minimal_distance:
        output_str = f"{result.min_closest_distance:.3f}"
    else:
        output_str = format_results(colors, result)
    print(output_str)

    if args.output:
        with open(args.output, "w") as f:
            f.write(output_str + "\n")
        print(f"\nResults saved to {args.output}", file=sys.stderr)
    return 0
