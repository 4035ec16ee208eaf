"""
Locus Configuration Module.

This module defines configuration classes for the Locus genetic algorithm,
including evolution parameters, early stopping policy, logging and
run-level settings.
"""

from typing import Optional, Dict, Any, Literal
from pydantic import BaseModel, Field, ConfigDict, ValidationError
from datetime import timedelta
import math

from src.locus.core.errors import ParameterError


class EvolutionParameters(BaseModel):
    """Parameters controlling the genetic algorithm evolution process."""

    model_config = ConfigDict(validate_assignment=True)

    # Population parameters
    population_size: int = Field(
        default=20,
        ge=1,
        description="Number of locations in the population"
    )
    generations: int = Field(
        default=100,
        ge=0,
        description="Maximum number of generations to evolve"
    )

    # Genetic operators
    elite_rate: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Share of the population carried over unchanged"
    )
    mutation_rate: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Probability of mutating an offspring"
    )
    mutation_scope: Literal["location", "gene"] = Field(
        default="location",
        description="Mutate every attribute together, or each attribute independently"
    )

    # Early stopping
    early_stop_threshold: float = Field(
        default=0.001,
        ge=0.0,
        description="Best-fitness change below which a generation counts as no improvement"
    )
    patience: int = Field(
        default=10,
        ge=1,
        description="Generations without improvement before stopping"
    )

    # Weights
    weight_pool_size: int = Field(
        default=10,
        ge=1,
        description="Number of weight vectors sampled when no custom weights are given"
    )

    @property
    def elite_count(self) -> int:
        """Number of elites kept each generation, never below one."""
        return max(1, math.floor(self.population_size * self.elite_rate))


class LoggingConfig(BaseModel):
    """Configuration for logging and monitoring."""

    enable_logging: bool = Field(
        default=True,
        description="Enable evolution progress logging"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )
    log_interval: int = Field(
        default=10,
        ge=1,
        description="Generations between progress logs"
    )
    save_snapshots: bool = Field(
        default=False,
        description="Save population snapshots during evolution"
    )
    snapshot_interval: int = Field(
        default=25,
        ge=1,
        description="Generations between snapshots"
    )
    metrics_export: bool = Field(
        default=True,
        description="Export progress metrics to Logfire"
    )


class LocusConfig(BaseModel):
    """Main configuration class for a Locus run."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )

    evolution: EvolutionParameters = Field(
        default_factory=EvolutionParameters,
        description="Evolution parameters"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging and monitoring configuration"
    )

    # General settings
    random_seed: Optional[int] = Field(
        default=None,
        description="Random seed for reproducibility"
    )
    checkpoint_dir: Optional[str] = Field(
        default=None,
        description="Directory for snapshots and final results (None disables writing)"
    )
    max_runtime: Optional[timedelta] = Field(
        default=None,
        description="Maximum wall-clock time for evolution"
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    def save(self, filepath: str) -> None:
        """Save configuration to JSON file."""
        import json
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> "LocusConfig":
        """Load configuration from JSON file."""
        import json
        with open(filepath, 'r') as f:
            data = json.load(f)
        return build_config(**data)

    def validate_consistency(self) -> None:
        """Validate configuration consistency across components."""
        if self.max_runtime is not None and self.max_runtime <= timedelta(0):
            raise ParameterError(f"max_runtime must be positive, got {self.max_runtime}")

        if self.logging.save_snapshots and self.checkpoint_dir is None:
            raise ParameterError("save_snapshots requires a checkpoint_dir")


def build_config(**kwargs: Any) -> LocusConfig:
    """Build a LocusConfig, reporting invalid values as ParameterError."""
    try:
        return LocusConfig(**kwargs)
    except ValidationError as e:
        raise ParameterError(f"Invalid run parameters: {e}") from e


# Convenience functions
def create_default_config() -> LocusConfig:
    """Create a default configuration suitable for most use cases."""
    return LocusConfig()


def create_test_config() -> LocusConfig:
    """Create a configuration suitable for testing (smaller, faster)."""
    return LocusConfig(
        evolution=EvolutionParameters(
            population_size=10,
            generations=5,
            elite_rate=0.2,
            mutation_rate=0.2
        ),
        logging=LoggingConfig(
            log_interval=1,
            metrics_export=False
        ),
        random_seed=42
    )
