"""Sources of random candidate colors."""

from .colorspace import Color


class RandomizationStrategy:
    def generate(self, rng):
        raise NotImplementedError


class UniformRGB(RandomizationStrategy):
    """Uniformly distributed over the 8-bit sRGB cube."""

    def generate(self, rng):
        r, g, b = rng.integers(0, 256, size=3)
        return Color(r, g, b)
