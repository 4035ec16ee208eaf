"""
Locus fitness functions.

This module provides the fitness interface and the weighted-sum fitness
used to score locations.
"""

from src.locus.fitness.base import (
    FitnessFunction,
    FitnessMetrics
)

from src.locus.fitness.weighted_sum import (
    WeightedSumFitness
)

__all__ = [
    # Base classes
    "FitnessFunction",
    "FitnessMetrics",

    # Implementations
    "WeightedSumFitness"
]
