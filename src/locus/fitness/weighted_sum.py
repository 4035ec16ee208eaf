"""
Weighted-sum fitness for locations.

The score of a location is the sum over criteria of value * weight, where
the value of a negative-impact criterion is inverted against the top of the
range so that a lower raw value contributes more.
"""

from typing import Dict

from src.locus.core.location import Location, WeightVector
from src.locus.fitness.base import FitnessFunction, FitnessMetrics


class WeightedSumFitness(FitnessFunction):
    """Linear weighted-sum fitness with polarity inversion."""

    def adjusted_value(self, location: Location, category: str) -> float:
        """Raw attribute, or max - raw for negative-impact criteria."""
        value = location[category]
        if self.criteria.is_negative(category):
            value = self.criteria.ranges.max - value
        return value

    def contributions(self, location: Location, weights: WeightVector) -> Dict[str, float]:
        """Weighted contribution of each criterion to the score."""
        return {
            category: self.adjusted_value(location, category) * weights[category]
            for category in self.criteria.categories
        }

    def evaluate(self, location: Location, weights: WeightVector) -> float:
        score = 0.0
        for category in self.criteria.categories:
            score += self.adjusted_value(location, category) * weights[category]
        return score

    def calculate_metrics(self, location: Location, weights: WeightVector) -> FitnessMetrics:
        contributions = self.contributions(location, weights)
        return FitnessMetrics(
            score=self.evaluate(location, weights),
            details={
                "contributions": contributions,
                "adjusted_values": {
                    category: self.adjusted_value(location, category)
                    for category in self.criteria.categories
                },
                "weights": {category: weights[category] for category in self.criteria.categories}
            }
        )
