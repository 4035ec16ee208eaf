"""
Core functionality for the Locus site selection service.

This package contains application-level configuration shared by the
HTTP entry point and the genetic algorithm.
"""

from src.core.config import settings

__all__ = [
    "settings",
]
