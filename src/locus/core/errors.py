"""
Error taxonomy for the Locus genetic algorithm.

Configuration errors describe a malformed criteria set, parameter errors
describe invalid run parameters. Both are raised before any generation runs.
"""


class LocusError(Exception):
    """Base class for all Locus errors."""


class ConfigurationError(LocusError, ValueError):
    """Malformed criteria configuration."""


class ParameterError(LocusError, ValueError):
    """Invalid run parameters or custom weights."""
