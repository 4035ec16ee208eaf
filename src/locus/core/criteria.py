"""
Criteria Configuration for the Locus genetic algorithm.

A criteria set describes the scoring dimensions of a location: ordered
criterion ids with display labels, one numeric range shared by every
criterion, the criteria whose higher raw value is worse (negative impact)
and the default importance weight of each criterion.
"""

from typing import Dict, Any, Tuple, Union
from pathlib import Path
import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.locus.core.errors import ConfigurationError


class CriteriaRange(BaseModel):
    """Valid numeric range shared by all criteria."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    min: float = Field(default=0.0, description="Lowest valid attribute value")
    max: float = Field(default=10.0, description="Highest valid attribute value")

    @model_validator(mode="after")
    def validate_bounds(self) -> "CriteriaRange":
        if self.min >= self.max:
            raise ValueError(f"Range min ({self.min}) must be lower than max ({self.max})")
        return self

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, value: float) -> float:
        """Clamp a value into the range."""
        return max(self.min, min(self.max, value))

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


class CriteriaConfig(BaseModel):
    """
    Immutable description of the scoring dimensions of a location.

    The configuration is passed explicitly to the candidate generator, the
    fitness evaluator and the population operators, so independent
    configurations can be used side by side.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    categories: Tuple[str, ...] = Field(description="Ordered criterion ids")
    category_names: Tuple[str, ...] = Field(description="Display labels, same order as categories")
    ranges: CriteriaRange = Field(default_factory=CriteriaRange)
    negative_impact: Tuple[str, ...] = Field(
        default=(),
        description="Criteria where the highest raw value is worse"
    )
    default_weights: Dict[str, float] = Field(description="Default weight per criterion")

    @model_validator(mode="after")
    def validate_criteria(self) -> "CriteriaConfig":
        """Check that every criterion is labelled, weighted and known."""
        if not self.categories:
            raise ValueError("At least one criterion is required")

        if len(set(self.categories)) != len(self.categories):
            raise ValueError(f"Criterion ids must be distinct: {list(self.categories)}")

        if len(self.category_names) != len(self.categories):
            raise ValueError(
                f"Got {len(self.category_names)} display labels for "
                f"{len(self.categories)} criteria"
            )

        known = set(self.categories)
        unknown_negative = [c for c in self.negative_impact if c not in known]
        if unknown_negative:
            raise ValueError(f"Negative impact names unknown criteria: {unknown_negative}")

        unknown_weights = [c for c in self.default_weights if c not in known]
        if unknown_weights:
            raise ValueError(f"Default weights name unknown criteria: {unknown_weights}")

        missing_weights = [c for c in self.categories if c not in self.default_weights]
        if missing_weights:
            raise ValueError(f"Missing default weight for criteria: {missing_weights}")

        return self

    def is_negative(self, category: str) -> bool:
        """Whether a higher raw value of this criterion is worse."""
        return category in self.negative_impact

    def label(self, category: str) -> str:
        """Display label of a criterion."""
        return self.category_names[self.categories.index(category)]

    def labels(self) -> Dict[str, str]:
        return dict(zip(self.categories, self.category_names))

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CriteriaConfig":
        """Build a configuration, reporting problems as ConfigurationError."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid criteria configuration: {e}") from e

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> "CriteriaConfig":
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, filepath: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


def create_default_criteria() -> CriteriaConfig:
    """Criteria for evaluating solar installation sites."""
    return CriteriaConfig(
        categories=("sunlight", "soil", "terrain", "distance", "cost"),
        category_names=(
            "Sunlight",
            "Soil quality",
            "Topography quality",
            "Distance from the connection point",
            "Installation cost"
        ),
        ranges=CriteriaRange(min=0, max=10),
        negative_impact=("distance", "cost"),
        default_weights={
            "sunlight": 0.8,
            "soil": 0.7,
            "terrain": 0.6,
            "distance": -0.5,
            "cost": -0.7
        }
    )


DEFAULT_CRITERIA: CriteriaConfig = create_default_criteria()
