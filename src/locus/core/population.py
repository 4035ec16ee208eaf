"""
Population Management for the Locus Genetic Algorithm.

This module tracks the population of locations throughout the evolution
process: the current individuals, generation counter, per-generation
statistics and history, and JSON snapshots.
"""

from typing import List, Optional, Dict, Any, Sequence
import statistics
import json
from datetime import datetime

import numpy as np

from src.locus.core.criteria import CriteriaConfig
from src.locus.core.location import Location, WeightVector
from src.locus.fitness.base import FitnessFunction


class Population:
    """
    Holds the current generation of locations.

    The population is replaced wholesale every generation; statistics and
    history are computed against the active weight vector.
    """

    def __init__(self, criteria: CriteriaConfig, individuals: Optional[Sequence[Location]] = None, generation: int = 0):
        """Initialize population for a criteria set."""
        self.criteria = criteria
        self.individuals: List[Location] = list(individuals or [])
        self.generation = generation
        self.statistics: Dict[str, Any] = {}
        self.history: List[Dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    def replace_population(self, new_individuals: Sequence[Location]) -> None:
        """Replace current population with the next generation."""
        self.individuals = list(new_individuals)
        self.generation += 1

    def calculate_statistics(self, fitness_function: FitnessFunction, weights: WeightVector) -> Dict[str, Any]:
        """Calculate fitness and spread statistics for the current generation."""
        if not self.individuals:
            return {}

        fitnesses = fitness_function.evaluate_population(self.individuals, weights)

        stats = {
            "generation": self.generation,
            "population_size": len(self.individuals),
            "best_fitness": max(fitnesses),
            "worst_fitness": min(fitnesses),
            "avg_fitness": statistics.mean(fitnesses),
            "median_fitness": statistics.median(fitnesses),
            "fitness_std": statistics.stdev(fitnesses) if len(fitnesses) > 1 else 0.0
        }

        # Mean per-criterion standard deviation, a cheap diversity measure
        matrix = np.array([
            [location[category] for category in self.criteria.categories]
            for location in self.individuals
        ])
        stats["attribute_spread"] = float(matrix.std(axis=0).mean())

        self.statistics = stats
        return stats

    def record_history(self, fitness_function: FitnessFunction, weights: WeightVector) -> Dict[str, Any]:
        """Record current population state in history."""
        entry = {
            **self.calculate_statistics(fitness_function, weights),
            "timestamp": datetime.now().isoformat()
        }
        self.history.append(entry)
        return entry

    def all_within_range(self) -> bool:
        return all(location.within(self.criteria) for location in self.individuals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "individuals": [location.to_dict() for location in self.individuals],
            "statistics": self.statistics,
            "criteria": self.criteria.to_dict()
        }

    def save_snapshot(self, filepath: str) -> None:
        """Save population snapshot to file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_snapshot(cls, filepath: str) -> "Population":
        """Load population from snapshot file."""
        with open(filepath, 'r') as f:
            snapshot = json.load(f)

        criteria = CriteriaConfig.from_dict(snapshot["criteria"])
        population = cls(
            criteria,
            individuals=[Location.from_dict(data) for data in snapshot["individuals"]],
            generation=snapshot["generation"]
        )
        population.statistics = snapshot.get("statistics", {})
        return population
