"""
Locus Genetic Algorithm for Weighted-Criteria Site Selection.

This module evolves a population of candidate locations, each described by a
fixed set of weighted criteria, toward the best linear weighted-sum score
using elitist selection, blending crossover, bounded mutation and early
stopping.
"""

from src.locus.core import (
    LocusError,
    ConfigurationError,
    ParameterError,
    CriteriaConfig,
    CriteriaRange,
    DEFAULT_CRITERIA,
    create_default_criteria,
    LocusConfig,
    EvolutionParameters,
    LoggingConfig,
    create_default_config,
    create_test_config,
    Location,
    WeightVector,
    CandidateGenerator,
    PopulationOperators,
    Population,
    GeneticAlgorithmEngine,
    EvolutionResult,
    EvolutionState,
    run
)
from src.locus.fitness import FitnessFunction, FitnessMetrics, WeightedSumFitness

__version__ = "1.0.0"

__all__ = [
    # Errors
    "LocusError",
    "ConfigurationError",
    "ParameterError",
    # Criteria
    "CriteriaConfig",
    "CriteriaRange",
    "DEFAULT_CRITERIA",
    "create_default_criteria",
    # Configuration
    "LocusConfig",
    "EvolutionParameters",
    "LoggingConfig",
    "create_default_config",
    "create_test_config",
    # Candidate model
    "Location",
    "WeightVector",
    "CandidateGenerator",
    # Population
    "PopulationOperators",
    "Population",
    # Fitness
    "FitnessFunction",
    "FitnessMetrics",
    "WeightedSumFitness",
    # Engine
    "GeneticAlgorithmEngine",
    "EvolutionResult",
    "EvolutionState",
    "run"
]
