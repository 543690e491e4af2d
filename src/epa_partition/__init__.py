"""
EPA Partition - Core Package

Random partitions from the Ewens-Pitman attraction distribution.

This package provides:
- Dense similarity matrices with borrowed views
- Permutation strategies (shuffle, nearest, random-nearest)
- The sequential EPA sampler and repeated-draw summaries
"""

__version__ = "0.1.0"

from .algorithms import (
    Clustering,
    EpaParameters,
    Permutation,
    PermutationStrategy,
    SquareMatrix,
    sample,
)

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import utils
from . import config

__all__ = [
    "Clustering",
    "EpaParameters",
    "Permutation",
    "PermutationStrategy",
    "SquareMatrix",
    "sample",
    "algorithms",
    "utils",
    "config",
]
