"""
Population Operators for the Locus genetic algorithm.

Selection keeps the best locations of a population, crossover blends two
parents attribute by attribute and mutation perturbs an offspring inside
the criteria range.
"""

from typing import List, Literal, Sequence

import numpy as np

from src.locus.core.criteria import CriteriaConfig
from src.locus.core.errors import ParameterError
from src.locus.core.location import Location, WeightVector
from src.locus.fitness.base import FitnessFunction


MutationScope = Literal["location", "gene"]

# Half-width of the uniform perturbation added by mutation
MUTATION_STEP = 0.5


class PopulationOperators:
    """
    Selection, crossover and mutation bound to one criteria set.

    The operators never modify their inputs; crossover and mutation return
    new Location records.
    """

    def __init__(
        self,
        criteria: CriteriaConfig,
        fitness_function: FitnessFunction,
        rng: np.random.Generator,
        mutation_scope: MutationScope = "location"
    ):
        self.criteria = criteria
        self.fitness_function = fitness_function
        self.rng = rng
        self.mutation_scope = mutation_scope

    def select(
        self,
        population: Sequence[Location],
        weights: WeightVector,
        elite_count: int
    ) -> List[Location]:
        """
        Return the `elite_count` fittest locations, best first.

        The sort is stable, so locations with equal fitness keep their
        population order. When `elite_count` exceeds the population size the
        whole population is returned, sorted.
        """
        if elite_count < 1:
            raise ParameterError(f"elite_count must be at least 1, got {elite_count}")

        scores = self.fitness_function.evaluate_population(population, weights)
        order = sorted(range(len(population)), key=lambda i: scores[i], reverse=True)
        return [population[i] for i in order[:elite_count]]

    def crossover(self, parent1: Location, parent2: Location) -> Location:
        """Blend two parents: every attribute is the mean of theirs, id from parent1."""
        attributes = {
            category: (parent1[category] + parent2[category]) / 2
            for category in self.criteria.categories
        }
        return parent1.with_attributes(attributes)

    def mutate(self, location: Location, mutation_rate: float) -> Location:
        """
        Perturb a location with probability `mutation_rate`.

        In "location" scope a single draw decides whether every attribute is
        perturbed; in "gene" scope each attribute gets its own draw. Each
        perturbation is uniform in [-0.5, 0.5] and the result is clamped to
        the criteria range.
        """
        if self.mutation_scope == "gene":
            return self._mutate_genes(location, mutation_rate)

        if self.rng.random() >= mutation_rate:
            return location

        attributes = {
            category: self._perturb(location[category])
            for category in self.criteria.categories
        }
        return location.with_attributes(attributes)

    def _mutate_genes(self, location: Location, mutation_rate: float) -> Location:
        attributes = {}
        changed = False
        for category in self.criteria.categories:
            value = location[category]
            if self.rng.random() < mutation_rate:
                value = self._perturb(value)
                changed = True
            attributes[category] = value
        return location.with_attributes(attributes) if changed else location

    def _perturb(self, value: float) -> float:
        delta = (self.rng.random() - 0.5) * 2 * MUTATION_STEP
        return float(self.criteria.ranges.clamp(value + delta))

    def pick_parent(self, selected: Sequence[Location]) -> Location:
        """Draw one parent uniformly from the selected locations."""
        return selected[int(self.rng.integers(0, len(selected)))]
