"""
Locus Site Selection - Source Package

This package contains the application settings and the Locus genetic
algorithm that searches for the best-scoring location over a set of
weighted criteria.
"""

__version__ = "1.0.0"

# Package-level imports for convenience
from src.core.config import settings

__all__ = [
    "settings",
    "__version__",
]
