"""
Unit tests for Logfire observability and run reporting (Subtask 1.7).

Tests verify that evolution progress and results are reported through the
engine logger and Logfire, and that the service configures Logfire on start.
"""

import importlib
import logging
from unittest.mock import patch

import pytest

import main
from src.locus import EvolutionParameters, GeneticAlgorithmEngine, LocusConfig, LoggingConfig


def logfire_messages(mock_logfire):
    return [c.args[0] for c in mock_logfire.info.call_args_list]


class TestEngineReporting:
    """Test progress and result reporting of the engine."""

    @pytest.fixture
    def mock_logfire(self, mocker):
        return mocker.patch("src.locus.core.engine.logfire")

    @pytest.fixture
    def config(self):
        return LocusConfig(
            evolution=EvolutionParameters(
                population_size=6,
                generations=6,
                early_stop_threshold=0.0
            ),
            logging=LoggingConfig(log_interval=2, metrics_export=True),
            random_seed=5
        )

    def test_progress_exported_on_interval(self, config, mock_logfire):
        GeneticAlgorithmEngine(config).run()

        progress = [
            c.kwargs for c in mock_logfire.info.call_args_list
            if c.args[0] == "Evolution Progress"
        ]
        assert [p["evolution_generation"] for p in progress] == [0, 2, 4]
        assert all("best_fitness" in p and "attribute_spread" in p for p in progress)

    def test_result_reported(self, config, mock_logfire):
        result = GeneticAlgorithmEngine(config).run()

        final = mock_logfire.info.call_args_list[-1]
        assert final.args[0] == "Evolution Result"
        assert final.kwargs["best_location_id"] == result.best_location.id
        assert final.kwargs["best_fitness"] == result.best_fitness
        assert final.kwargs["state"] == "exhausted"

    def test_result_logged_with_labels(self, config, mock_logfire, caplog):
        with caplog.at_level(logging.INFO, logger="locus.engine"):
            result = GeneticAlgorithmEngine(config).run()

        assert f"Best location ID: {result.best_location.id}" in caplog.text
        assert "Sunlight:" in caplog.text
        assert "Installation cost:" in caplog.text
        assert "Fitness:" in caplog.text

    def test_metrics_export_disabled(self, config, mock_logfire):
        config.logging.metrics_export = False

        GeneticAlgorithmEngine(config).run()

        assert "Evolution Progress" not in logfire_messages(mock_logfire)

    def test_logging_disabled(self, config, mock_logfire, caplog):
        config.logging.enable_logging = False

        with caplog.at_level(logging.INFO, logger="locus.engine"):
            GeneticAlgorithmEngine(config).run()

        assert "Best location ID" not in caplog.text
        assert logfire_messages(mock_logfire) == []

    def test_run_is_traced(self, config, mock_logfire):
        GeneticAlgorithmEngine(config).run()

        span_names = [c.args[0] for c in mock_logfire.span.call_args_list]
        assert span_names[0] == "Locus Evolution"
        assert "Initialize Population" in span_names
        assert span_names.count("Generation") == 6

    def test_early_stop_logged(self, mock_logfire, caplog):
        config = LocusConfig(
            evolution=EvolutionParameters(
                population_size=5,
                generations=20,
                early_stop_threshold=float("inf"),
                patience=1
            ),
            logging=LoggingConfig(enable_logging=False),
            random_seed=2
        )

        with caplog.at_level(logging.INFO, logger="locus.engine"):
            GeneticAlgorithmEngine(config).run()

        assert "Early stopping triggered at generation 1" in caplog.text


class TestServiceLogfire:
    """Test Logfire setup of the API service."""

    def test_logfire_configured_on_import(self):
        """Test that logfire.configure and FastAPI instrumentation run at import."""
        with patch("logfire.configure") as mock_configure, \
             patch("logfire.instrument_fastapi") as mock_instrument:
            importlib.reload(main)

            call_kwargs = mock_configure.call_args.kwargs
            assert call_kwargs["service_name"] == "locus-api"
            assert call_kwargs["send_to_logfire"] == "if-token-present"
            assert "environment" in call_kwargs

            assert mock_instrument.call_args.args[0] is main.app
