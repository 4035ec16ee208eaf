"""
Genetic Algorithm Engine for the Locus Framework.

This module implements the generational loop that evolves a population of
locations toward the best weighted-sum score: elitist selection, offspring
by crossover and mutation, early stopping and final reporting.
"""

from typing import List, Optional, Dict, Any, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
import logging
import json

import logfire
import numpy as np

from src.locus.core.config import LocusConfig, EvolutionParameters, LoggingConfig, build_config
from src.locus.core.criteria import CriteriaConfig, DEFAULT_CRITERIA
from src.locus.core.errors import ParameterError
from src.locus.core.location import CandidateGenerator, Location, WeightVector
from src.locus.core.operators import PopulationOperators
from src.locus.core.population import Population
from src.locus.fitness.base import FitnessFunction
from src.locus.fitness.weighted_sum import WeightedSumFitness


class EvolutionState(Enum):
    """Lifecycle of an evolution run."""
    INITIALIZED = "initialized"
    EVOLVING = "evolving"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


@dataclass
class EvolutionResult:
    """Outcome of an evolution run."""
    best_location: Location
    best_weights: WeightVector
    best_fitness: float
    state: EvolutionState
    generations_run: int
    early_stop_generation: Optional[int] = None
    history: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_location": self.best_location.to_dict(),
            "best_weights": dict(self.best_weights),
            "best_fitness": self.best_fitness,
            "state": self.state.value,
            "generations_run": self.generations_run,
            "early_stop_generation": self.early_stop_generation,
            "history": self.history
        }


FINISHED_STATES = (EvolutionState.CONVERGED, EvolutionState.EXHAUSTED, EvolutionState.CANCELLED)

StopCallback = Callable[[int], bool]


class GeneticAlgorithmEngine:
    """
    Main engine for running the location search.

    Owns the population, the weight pool and the random source of one run.
    Use `run()` for a complete search, or `initialize()` followed by
    `step()` calls to drive the generations one at a time.
    """

    def __init__(
        self,
        config: LocusConfig,
        criteria: Optional[CriteriaConfig] = None,
        custom_weights: Optional[Mapping[str, float]] = None,
        rng: Optional[np.random.Generator] = None,
        fitness_function: Optional[FitnessFunction] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the genetic algorithm engine.

        Args:
            config: Locus configuration
            criteria: Criteria set, defaults to the solar site criteria
            custom_weights: Fixed weight vector; disables weight sampling
            rng: Random source, defaults to one seeded from config.random_seed
            fitness_function: Scoring function, defaults to WeightedSumFitness
            logger: Optional logger instance
        """
        config.validate_consistency()

        self.config = config
        self.criteria = criteria or DEFAULT_CRITERIA
        self.logger = logger or self._setup_logger()
        self.rng = rng if rng is not None else np.random.default_rng(config.random_seed)

        self.fitness_function = fitness_function or WeightedSumFitness(self.criteria)
        self.generator = CandidateGenerator(self.criteria, self.rng)
        self.operators = PopulationOperators(
            self.criteria,
            self.fitness_function,
            self.rng,
            mutation_scope=config.evolution.mutation_scope
        )

        self.custom_weights: Optional[WeightVector] = None
        if custom_weights is not None:
            self.custom_weights = self.generator.validate_weights(custom_weights)

        # State tracking
        self.state = EvolutionState.INITIALIZED
        self.population: Optional[Population] = None
        self.weight_population: List[WeightVector] = []
        self.elite_count = config.evolution.elite_count
        self.best_fitness = float("-inf")
        self.no_improvement_count = 0
        self.generations_run = 0
        self.early_stop_generation: Optional[int] = None

        self.checkpoint_dir: Optional[Path] = None
        if config.checkpoint_dir:
            self.checkpoint_dir = Path(config.checkpoint_dir)
            self.checkpoint_dir.mkdir(parents=True, exist_ok=True)

    def _setup_logger(self) -> logging.Logger:
        """Setup default logger."""
        logger = logging.getLogger("locus.engine")
        logger.setLevel(getattr(logging, self.config.logging.log_level))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    @property
    def evolution(self) -> EvolutionParameters:
        return self.config.evolution

    @property
    def active_weights(self) -> WeightVector:
        """The weight vector every generation is scored with."""
        if not self.weight_population:
            raise RuntimeError("Engine is not initialized")
        return self.weight_population[0]

    def initialize(self, initial_population: Optional[Sequence[Location]] = None) -> Population:
        """
        Build the initial population and the weight pool.

        Args:
            initial_population: Optional locations to start from instead of
                random ones; must match the configured population size

        Returns:
            The initial population
        """
        with logfire.span("Initialize Population", population_size=self.evolution.population_size):
            if initial_population is not None:
                individuals = self._validate_initial_population(initial_population)
            else:
                individuals = self.generator.generate_population(self.evolution.population_size)

            self.population = Population(self.criteria, individuals, generation=0)

            if self.custom_weights is not None:
                self.weight_population = [self.custom_weights]
            else:
                self.weight_population = self.generator.generate_weight_population(
                    self.evolution.weight_pool_size
                )

            self.state = EvolutionState.INITIALIZED
            self.best_fitness = float("-inf")
            self.no_improvement_count = 0
            self.generations_run = 0
            self.early_stop_generation = None

            self.logger.debug(
                f"Initialized population with {len(self.population)} locations, "
                f"elite count {self.elite_count}"
            )
            return self.population

    def _validate_initial_population(self, individuals: Sequence[Location]) -> List[Location]:
        if len(individuals) != self.evolution.population_size:
            raise ParameterError(
                f"Initial population has {len(individuals)} locations, "
                f"expected {self.evolution.population_size}"
            )

        ids = [location.id for location in individuals]
        if len(set(ids)) != len(ids):
            raise ParameterError(f"Initial population has duplicate location ids: {ids}")

        for location in individuals:
            missing = [c for c in self.criteria.categories if c not in location.attributes]
            if missing:
                raise ParameterError(f"Location {location.id} is missing criteria: {missing}")
            if not location.within(self.criteria):
                raise ParameterError(f"Location {location.id} has attributes outside the range")

        return list(individuals)

    def step(self) -> bool:
        """
        Evolve one generation.

        Returns:
            True when early stopping fired on this generation

        Raises:
            RuntimeError: If the run already converged, exhausted or was cancelled
        """
        if self.population is None:
            self.initialize()
        if self.state in FINISHED_STATES:
            raise RuntimeError(
                f"Evolution already {self.state.value}; call initialize() to start a new run"
            )

        generation = self.generations_run
        weights = self.active_weights
        self.state = EvolutionState.EVOLVING

        with logfire.span("Generation", generation=generation):
            selected = self.operators.select(self.population.individuals, weights, self.elite_count)

            # Elites carry over unchanged
            new_individuals = list(selected)

            while len(new_individuals) < self.evolution.population_size:
                parent1 = self.operators.pick_parent(selected)
                parent2 = self.operators.pick_parent(selected)
                child = self.operators.crossover(parent1, parent2)
                new_individuals.append(self.operators.mutate(child, self.evolution.mutation_rate))

            self.population.replace_population(new_individuals)
            self.generations_run += 1

            current_best = self.fitness_function.evaluate(self.best_location(), weights)
            self.population.record_history(self.fitness_function, weights)

            if self.config.logging.enable_logging and generation % self.config.logging.log_interval == 0:
                self._log_progress(generation)

            if self.config.logging.save_snapshots and \
               generation % self.config.logging.snapshot_interval == 0:
                self._save_snapshot(generation)

            return self._update_early_stopping(current_best, generation)

    def _update_early_stopping(self, current_best: float, generation: int) -> bool:
        if abs(current_best - self.best_fitness) < self.evolution.early_stop_threshold:
            self.no_improvement_count += 1
            if self.no_improvement_count >= self.evolution.patience:
                self.state = EvolutionState.CONVERGED
                self.early_stop_generation = generation
                return True
        else:
            self.no_improvement_count = 0
            self.best_fitness = current_best
        return False

    def best_location(self) -> Location:
        """Fittest location of the current population under the active weights."""
        if self.population is None:
            raise RuntimeError("Engine is not initialized")
        return self.operators.select(self.population.individuals, self.active_weights, 1)[0]

    def run(
        self,
        initial_population: Optional[Sequence[Location]] = None,
        should_stop: Optional[StopCallback] = None
    ) -> EvolutionResult:
        """
        Run the genetic algorithm evolution process.

        Args:
            initial_population: Optional locations to start from
            should_stop: Called with the generation index before each
                generation; returning True cancels the run

        Returns:
            Best location, the weights it was scored with, and run details
        """
        with logfire.span("Locus Evolution",
                          population_size=self.evolution.population_size,
                          generations=self.evolution.generations):

            start_time = datetime.now()
            self.logger.info(
                f"Starting evolution with population size {self.evolution.population_size}"
            )

            self.initialize(initial_population)

            for generation in range(self.evolution.generations):
                if self._should_cancel(generation, start_time, should_stop):
                    self.state = EvolutionState.CANCELLED
                    break

                if self.step():
                    self.logger.info(f"Early stopping triggered at generation {generation}")
                    break

            if self.state in (EvolutionState.INITIALIZED, EvolutionState.EVOLVING):
                self.state = EvolutionState.EXHAUSTED

            result = self._build_result()
            self._report(result, datetime.now() - start_time)
            self._save_final_results(result)
            return result

    def _should_cancel(
        self,
        generation: int,
        start_time: datetime,
        should_stop: Optional[StopCallback]
    ) -> bool:
        if self.config.max_runtime and datetime.now() - start_time > self.config.max_runtime:
            self.logger.info(f"Terminating due to runtime limit before generation {generation}")
            return True

        if should_stop is not None and should_stop(generation):
            self.logger.info(f"Evolution cancelled before generation {generation}")
            return True

        return False

    def _build_result(self) -> EvolutionResult:
        weights = self.active_weights
        best = self.best_location()
        return EvolutionResult(
            best_location=best,
            best_weights=weights,
            best_fitness=self.fitness_function.evaluate(best, weights),
            state=self.state,
            generations_run=self.generations_run,
            early_stop_generation=self.early_stop_generation,
            history=list(self.population.history)
        )

    def _log_progress(self, generation: int) -> None:
        """Log evolution progress."""
        stats = self.population.statistics

        self.logger.info(
            f"Generation {generation}: "
            f"Best: {stats.get('best_fitness', 0):.4f}, "
            f"Avg: {stats.get('avg_fitness', 0):.4f}, "
            f"Spread: {stats.get('attribute_spread', 0):.3f}"
        )

        if self.config.logging.metrics_export:
            metrics = {
                "evolution_generation": generation,
                "no_improvement_count": self.no_improvement_count,
                **{k: v for k, v in stats.items() if k != "generation"}
            }
            logfire.info("Evolution Progress", **metrics)

    def _report(self, result: EvolutionResult, elapsed) -> None:
        """Log the winning location, its weights and fitness."""
        if not self.config.logging.enable_logging:
            return

        location = result.best_location
        self.logger.info(
            f"Evolution {result.state.value} after {result.generations_run} generations in {elapsed}"
        )
        self.logger.info(f"Best location ID: {location.id}")
        for category in self.criteria.categories:
            self.logger.info(
                f"  {self.criteria.label(category)}: {location[category]:.4f} "
                f"(weight {result.best_weights[category]:+.4f})"
            )
        self.logger.info(f"Fitness: {result.best_fitness:.4f}")

        logfire.info(
            "Evolution Result",
            state=result.state.value,
            generations_run=result.generations_run,
            early_stop_generation=result.early_stop_generation,
            best_location_id=location.id,
            best_location=dict(location.attributes),
            best_weights=dict(result.best_weights),
            best_fitness=result.best_fitness
        )

    def _save_snapshot(self, generation: int) -> None:
        """Save population snapshot."""
        if self.checkpoint_dir is None:
            return

        filepath = self.checkpoint_dir / f"population_gen_{generation:04d}.json"
        self.population.save_snapshot(str(filepath))
        self.logger.debug(f"Saved snapshot to {filepath}")

    def _save_final_results(self, result: EvolutionResult) -> None:
        """Save final evolution results."""
        if self.checkpoint_dir is None:
            return

        results = {
            "config": self.config.to_dict(),
            "criteria": self.criteria.to_dict(),
            **result.to_dict()
        }

        results_file = self.checkpoint_dir / "final_results.json"
        with open(results_file, 'w') as f:
            json.dump(results, f, indent=2)

        self.logger.info(f"Saved final results to {self.checkpoint_dir}")


def run(
    generations: int,
    population_size: int,
    custom_weights: Optional[Mapping[str, float]] = None,
    elite_rate: float = 0.1,
    mutation_rate: float = 0.1,
    early_stop_threshold: float = 0.001,
    patience: int = 10,
    *,
    criteria: Optional[CriteriaConfig] = None,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    logging_config: Optional[LoggingConfig] = None
) -> EvolutionResult:
    """
    Search for the best location with a single call.

    Raises:
        ParameterError: If any run parameter or the custom weights are invalid
    """
    config = build_config(
        evolution={
            "generations": generations,
            "population_size": population_size,
            "elite_rate": elite_rate,
            "mutation_rate": mutation_rate,
            "early_stop_threshold": early_stop_threshold,
            "patience": patience
        },
        logging=logging_config or LoggingConfig(),
        random_seed=seed
    )
    engine = GeneticAlgorithmEngine(config, criteria=criteria, custom_weights=custom_weights, rng=rng)
    return engine.run()
