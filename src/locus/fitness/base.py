"""
Base classes for fitness evaluation in the Locus genetic algorithm.

This module provides the abstract interface that fitness functions implement
to score a location under a weight vector.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Sequence
from dataclasses import dataclass, field

from src.locus.core.criteria import CriteriaConfig
from src.locus.core.location import Location, WeightVector


@dataclass
class FitnessMetrics:
    """Fitness score with its breakdown."""
    score: float  # Overall fitness score
    details: Dict[str, Any] = field(default_factory=dict)  # Detailed breakdown of the score


class FitnessFunction(ABC):
    """
    Abstract base class for fitness functions.

    A fitness function is bound to one criteria set and maps a location and
    a weight vector to a single scalar, where higher is better.
    """

    def __init__(self, criteria: CriteriaConfig):
        """
        Initialize fitness function with a criteria set.

        Args:
            criteria: Criteria the scored locations are described by
        """
        self.criteria = criteria

    @abstractmethod
    def evaluate(self, location: Location, weights: WeightVector) -> float:
        """
        Evaluate a location and return a fitness score.

        Args:
            location: The location to evaluate
            weights: Weight per criterion

        Returns:
            Fitness score, higher is better
        """
        pass

    @abstractmethod
    def calculate_metrics(self, location: Location, weights: WeightVector) -> FitnessMetrics:
        """
        Calculate detailed metrics for a location.

        Args:
            location: The location to analyze
            weights: Weight per criterion

        Returns:
            Fitness metrics including score and breakdown
        """
        pass

    def evaluate_population(self, population: Sequence[Location], weights: WeightVector) -> List[float]:
        """Score every location of a population, in order."""
        return [self.evaluate(location, weights) for location in population]
