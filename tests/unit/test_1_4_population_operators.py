"""
Unit tests for the Population Operators (Subtask 1.4).

Tests cover:
- Elitist truncation selection and its tie ordering
- Arithmetic crossover
- All-or-nothing and per-gene mutation, bounded by the range
- Population bookkeeping and snapshots
"""

import numpy as np
import pytest

from src.locus import (
    DEFAULT_CRITERIA,
    CandidateGenerator,
    Location,
    ParameterError,
    Population,
    PopulationOperators,
    WeightedSumFitness
)


class TestSelection:
    """Test suite for elitist selection."""

    def test_selects_fittest_first(self, operators, four_locations, unit_weights):
        selected = operators.select(four_locations, unit_weights, 2)

        assert [location.id for location in selected] == [2, 4]

    def test_full_sort_when_elite_count_exceeds_population(self, operators, four_locations, unit_weights):
        selected = operators.select(four_locations, unit_weights, 10)

        assert [location.id for location in selected] == [2, 4, 3, 1]

    def test_ties_keep_population_order(self, operators, unit_weights):
        population = [
            Location(id=1, attributes={"a": 5.0, "b": 5.0}),
            Location(id=2, attributes={"a": 6.0, "b": 6.0}),
            Location(id=3, attributes={"a": 9.0, "b": 1.0}),
            Location(id=4, attributes={"a": 4.0, "b": 4.0}),
        ]

        selected = operators.select(population, unit_weights, 4)

        assert [location.id for location in selected] == [3, 1, 2, 4]

    def test_selection_does_not_reorder_input(self, operators, four_locations, unit_weights):
        original = list(four_locations)
        operators.select(four_locations, unit_weights, 2)

        assert four_locations == original

    def test_elite_count_must_be_positive(self, operators, four_locations, unit_weights):
        with pytest.raises(ParameterError):
            operators.select(four_locations, unit_weights, 0)


class TestCrossover:
    """Test suite for arithmetic crossover."""

    def test_child_is_parent_mean(self, operators):
        parent1 = Location(id=5, attributes={"a": 2.0, "b": 8.0})
        parent2 = Location(id=9, attributes={"a": 6.0, "b": 1.0})

        child = operators.crossover(parent1, parent2)

        assert child.id == 5
        assert child["a"] == pytest.approx(4.0)
        assert child["b"] == pytest.approx(4.5)

    def test_parents_are_untouched(self, operators):
        parent1 = Location(id=5, attributes={"a": 2.0, "b": 8.0})
        parent2 = Location(id=9, attributes={"a": 6.0, "b": 1.0})

        operators.crossover(parent1, parent2)

        assert parent1["a"] == 2.0
        assert parent2["b"] == 1.0

    def test_child_within_range(self, rng):
        generator = CandidateGenerator(DEFAULT_CRITERIA, rng)
        operators = PopulationOperators(DEFAULT_CRITERIA, WeightedSumFitness(DEFAULT_CRITERIA), rng)
        population = generator.generate_population(30)

        for parent1, parent2 in zip(population, reversed(population)):
            assert operators.crossover(parent1, parent2).within(DEFAULT_CRITERIA)


class TestMutation:
    """Test suite for bounded mutation."""

    def test_zero_rate_returns_location_unchanged(self, operators):
        location = Location(id=1, attributes={"a": 5.0, "b": 5.0})

        for _ in range(20):
            assert operators.mutate(location, 0.0) is location

    def test_full_rate_changes_every_attribute(self, operators):
        location = Location(id=1, attributes={"a": 5.0, "b": 5.0})

        mutated = operators.mutate(location, 1.0)

        assert mutated is not location
        assert mutated.id == 1
        assert mutated["a"] != 5.0
        assert mutated["b"] != 5.0
        assert abs(mutated["a"] - 5.0) <= 0.5
        assert abs(mutated["b"] - 5.0) <= 0.5
        assert location["a"] == 5.0

    def test_mutation_is_clamped(self, operators, two_criteria):
        corner = Location(id=1, attributes={"a": 0.0, "b": 10.0})

        for _ in range(200):
            mutated = operators.mutate(corner, 1.0)
            assert mutated.within(two_criteria)

    def test_mutation_is_all_or_nothing(self, two_criteria):
        """Test that a location is either fully perturbed or left alone."""
        rng = np.random.default_rng(5)
        operators = PopulationOperators(two_criteria, WeightedSumFitness(two_criteria), rng)
        location = Location(id=1, attributes={"a": 5.0, "b": 5.0})

        changed = 0
        for _ in range(300):
            mutated = operators.mutate(location, 0.5)
            moved = [mutated[c] != location[c] for c in two_criteria.categories]
            assert all(moved) or not any(moved)
            changed += all(moved)

        assert 90 < changed < 210

    def test_per_gene_scope(self, two_criteria):
        """Test that gene scope can perturb a single attribute."""
        rng = np.random.default_rng(11)
        operators = PopulationOperators(
            two_criteria, WeightedSumFitness(two_criteria), rng, mutation_scope="gene"
        )
        location = Location(id=1, attributes={"a": 5.0, "b": 5.0})

        partial = 0
        for _ in range(300):
            mutated = operators.mutate(location, 0.5)
            moved = [mutated[c] != location[c] for c in two_criteria.categories]
            partial += any(moved) and not all(moved)

        assert partial > 0

    def test_pick_parent_from_selected(self, operators, four_locations):
        selected = four_locations[:2]

        for _ in range(50):
            assert operators.pick_parent(selected) in selected


class TestPopulation:
    """Test suite for population bookkeeping."""

    def test_replace_population_advances_generation(self, two_criteria, four_locations):
        population = Population(two_criteria, four_locations)

        population.replace_population(list(reversed(four_locations)))

        assert population.generation == 1
        assert population.individuals[0].id == 4
        assert len(population) == 4

    def test_statistics(self, two_criteria, four_locations, unit_weights):
        population = Population(two_criteria, four_locations)

        stats = population.calculate_statistics(WeightedSumFitness(two_criteria), unit_weights)

        assert stats["best_fitness"] == pytest.approx(18)
        assert stats["worst_fitness"] == pytest.approx(4)
        assert stats["avg_fitness"] == pytest.approx(11.5)
        assert stats["population_size"] == 4
        assert stats["attribute_spread"] > 0

    def test_record_history(self, two_criteria, four_locations, unit_weights):
        population = Population(two_criteria, four_locations)

        population.record_history(WeightedSumFitness(two_criteria), unit_weights)

        assert len(population.history) == 1
        assert "timestamp" in population.history[0]

    def test_snapshot_round_trip(self, two_criteria, four_locations, tmp_path):
        population = Population(two_criteria, four_locations, generation=3)
        path = tmp_path / "snapshot.json"

        population.save_snapshot(str(path))
        loaded = Population.load_snapshot(str(path))

        assert loaded.generation == 3
        assert loaded.individuals == four_locations
        assert loaded.criteria == two_criteria
