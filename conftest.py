"""
PyTest configuration and fixtures for the Locus site selection service.

This module provides shared test fixtures: seeded random sources, criteria
sets, run configurations and the API test client.
"""

import os
import sys
from typing import AsyncGenerator, Generator, List

import numpy as np
import pytest
import pytest_asyncio
import logfire
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOGFIRE_ENVIRONMENT", "testing")

# Keep spans local during tests
logfire.configure(send_to_logfire=False, console=False)

from src.core.config import settings
from src.locus import (
    CriteriaConfig,
    CriteriaRange,
    EvolutionParameters,
    Location,
    LocusConfig,
    LoggingConfig,
    PopulationOperators,
    WeightedSumFitness,
    create_default_criteria
)


# Override settings for testing
settings.environment = "testing"
settings.logfire_environment = "testing"


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source for reproducible tests."""
    return np.random.default_rng(1234)


@pytest.fixture
def default_criteria() -> CriteriaConfig:
    """The built-in solar site criteria."""
    return create_default_criteria()


@pytest.fixture
def two_criteria() -> CriteriaConfig:
    """Two criteria on [0, 10]: `a` higher is better, `b` lower is better."""
    return CriteriaConfig(
        categories=("a", "b"),
        category_names=("Alpha", "Beta"),
        ranges=CriteriaRange(min=0, max=10),
        negative_impact=("b",),
        default_weights={"a": 1.0, "b": 1.0}
    )


@pytest.fixture
def unit_weights() -> dict:
    return {"a": 1.0, "b": 1.0}


@pytest.fixture
def four_locations() -> List[Location]:
    """Population for the two-criteria scenario; scores are a + (10 - b)."""
    return [
        Location(id=1, attributes={"a": 2.0, "b": 8.0}),  # 4
        Location(id=2, attributes={"a": 9.0, "b": 1.0}),  # 18
        Location(id=3, attributes={"a": 5.0, "b": 5.0}),  # 10
        Location(id=4, attributes={"a": 7.0, "b": 3.0}),  # 14
    ]


@pytest.fixture
def operators(two_criteria, rng) -> PopulationOperators:
    return PopulationOperators(two_criteria, WeightedSumFitness(two_criteria), rng)


@pytest.fixture
def quiet_logging() -> LoggingConfig:
    """Logging configuration without progress output or metric export."""
    return LoggingConfig(enable_logging=False, metrics_export=False)


@pytest.fixture
def test_config(quiet_logging) -> LocusConfig:
    """Small, seeded configuration for fast engine tests."""
    return LocusConfig(
        evolution=EvolutionParameters(
            population_size=10,
            generations=15,
            elite_rate=0.2,
            mutation_rate=0.3,
            early_stop_threshold=0.0,
            patience=5
        ),
        logging=quiet_logging,
        random_seed=7
    )


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create a test client for the API."""
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client against the ASGI app."""
    from main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client


# Test markers
pytest.mark.slow = pytest.mark.slow
pytest.mark.integration = pytest.mark.integration
pytest.mark.unit = pytest.mark.unit
