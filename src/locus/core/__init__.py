"""
Locus Core Module - Genetic Algorithm Components.

This module contains the core components of the Locus genetic algorithm,
including criteria and run configuration, the location model, population
operators and management, and the main evolution engine.
"""

from src.locus.core.errors import (
    LocusError,
    ConfigurationError,
    ParameterError
)

from src.locus.core.criteria import (
    CriteriaConfig,
    CriteriaRange,
    DEFAULT_CRITERIA,
    create_default_criteria
)

from src.locus.core.config import (
    LocusConfig,
    EvolutionParameters,
    LoggingConfig,
    build_config,
    create_default_config,
    create_test_config
)

from src.locus.core.location import (
    Location,
    WeightVector,
    CandidateGenerator
)

from src.locus.core.operators import (
    PopulationOperators
)

from src.locus.core.population import (
    Population
)

from src.locus.core.engine import (
    GeneticAlgorithmEngine,
    EvolutionResult,
    EvolutionState,
    run
)

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
    "build_config",
    "create_default_config",
    "create_test_config",

    # Candidate model
    "Location",
    "WeightVector",
    "CandidateGenerator",

    # Operators and population
    "PopulationOperators",
    "Population",

    # Engine
    "GeneticAlgorithmEngine",
    "EvolutionResult",
    "EvolutionState",
    "run"
]
