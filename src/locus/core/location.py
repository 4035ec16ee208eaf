"""
Candidate Representation for the Locus Genetic Algorithm.

This module defines the location record evolved by the genetic algorithm,
the weight vector type used to score it, and the generator that creates
random locations and weight vectors for a criteria set.
"""

from typing import Dict, List, Any, Mapping, Optional
from dataclasses import dataclass, field
from types import MappingProxyType
import math
import numbers

import numpy as np

from src.locus.core.criteria import CriteriaConfig
from src.locus.core.errors import ParameterError


WeightVector = Dict[str, float]

# Half-width of the uniform jitter added to each default weight
WEIGHT_JITTER = 0.1


@dataclass(frozen=True)
class Location:
    """
    A candidate solution: an identifier plus one value per criterion.

    Locations are immutable value records. Crossover and mutation build new
    records, so a location carried over as an elite can be shared between
    generations safely.
    """

    id: int
    attributes: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __getitem__(self, category: str) -> float:
        return self.attributes[category]

    def with_attributes(self, attributes: Mapping[str, float]) -> "Location":
        """Return a copy of this location with new attribute values."""
        return Location(id=self.id, attributes=attributes)

    def within(self, config: CriteriaConfig) -> bool:
        """Whether every configured attribute lies inside the range."""
        return all(config.ranges.contains(self.attributes[c]) for c in config.categories)

    def to_dict(self) -> Dict[str, Any]:
        """Convert location to dictionary representation."""
        return {
            "id": self.id,
            "attributes": dict(self.attributes)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Location":
        """Create location from dictionary representation."""
        return cls(id=int(data["id"]), attributes=data["attributes"])


class CandidateGenerator:
    """
    Creates random locations and weight vectors for a criteria set.

    All randomness is drawn from the injected generator, so a seeded
    generator reproduces the same candidates.
    """

    def __init__(self, criteria: CriteriaConfig, rng: np.random.Generator):
        self.criteria = criteria
        self.rng = rng

    def generate_location(self, location_id: int) -> Location:
        """Create a location with every attribute drawn uniformly from the range."""
        span = self.criteria.ranges.span
        low = self.criteria.ranges.min
        attributes = {
            category: float(self.rng.random() * span + low)
            for category in self.criteria.categories
        }
        return Location(id=location_id, attributes=attributes)

    def generate_population(self, size: int) -> List[Location]:
        """Create `size` random locations with ids 1..size."""
        if size < 1:
            raise ParameterError(f"Population size must be at least 1, got {size}")
        return [self.generate_location(i + 1) for i in range(size)]

    def generate_weights(self) -> WeightVector:
        """Sample a weight vector around the default weights."""
        weights: WeightVector = {}
        for category in self.criteria.categories:
            base_weight = self.criteria.default_weights.get(category, 0.0)
            jitter = (self.rng.random() - 0.5) * 2 * WEIGHT_JITTER
            weights[category] = float(max(-1.0, min(1.0, base_weight + jitter)))
        return weights

    def generate_weight_population(self, size: int) -> List[WeightVector]:
        """Sample `size` independent weight vectors."""
        return [self.generate_weights() for _ in range(size)]

    def validate_weights(self, weights: Optional[Mapping[str, float]]) -> WeightVector:
        """
        Check caller-supplied weights against the criteria set.

        Args:
            weights: Mapping from criterion id to weight

        Returns:
            The weights as a plain dict, in criteria order

        Raises:
            ParameterError: If a criterion is missing, unknown or not finite
        """
        if not weights:
            raise ParameterError("Custom weights must not be empty")

        known = set(self.criteria.categories)
        missing = [c for c in self.criteria.categories if c not in weights]
        unknown = [c for c in weights if c not in known]
        if missing or unknown:
            raise ParameterError(
                f"Custom weights must name exactly the configured criteria "
                f"(missing: {missing}, unknown: {unknown})"
            )

        validated: WeightVector = {}
        for category in self.criteria.categories:
            value = weights[category]
            if not isinstance(value, numbers.Real) or isinstance(value, bool) or not math.isfinite(value):
                raise ParameterError(f"Weight for {category!r} must be a finite number, got {value!r}")
            validated[category] = float(value)
        return validated
