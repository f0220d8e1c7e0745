from .colorspace import Color, Lab
from .delta_e import DistanceMetric, cie76, ciede2000
from .neighbors import DistanceResult
from .optimizer import (
    IterationStatistics,
    OptimizationMode,
    OptimizationTarget,
    SimulatedAnnealing,
    SimulationParameters,
    distinct_colors,
)
from .sequence import rearrange_sequence

__version__ = "0.1.0"
