"""
Algorithm Core Library - EPA partition sampling.

This module provides the similarity matrix, permutation strategies, the
partition state and the EPA sampler, with minimal dependencies.
"""

from .similarity import SquareMatrix, SquareMatrixView, similarity_from_distances
from .clustering import (
    Clustering,
    SelectionError,
    adjusted_rand_index,
    pairwise_ari,
    co_clustering_matrix,
)
from .permutation import (
    Permutation,
    PermutationStrategy,
    build_permutation,
    nearest_neighbor,
    random_nearest_neighbor,
    uniform_shuffle,
)
from .epa import (
    DegenerateSimilarityError,
    EpaParameters,
    SampleTrace,
    StepRecord,
    adjacent_similarity_mean,
    sample,
    sample_with_trace,
)
from .draws import DrawConfig, DrawResult, run_draws

__all__ = [
    # Similarity
    "SquareMatrix",
    "SquareMatrixView",
    "similarity_from_distances",
    # Partition state
    "Clustering",
    "SelectionError",
    "adjusted_rand_index",
    "pairwise_ari",
    "co_clustering_matrix",
    # Permutations
    "Permutation",
    "PermutationStrategy",
    "build_permutation",
    "nearest_neighbor",
    "random_nearest_neighbor",
    "uniform_shuffle",
    # Sampler
    "DegenerateSimilarityError",
    "EpaParameters",
    "SampleTrace",
    "StepRecord",
    "adjacent_similarity_mean",
    "sample",
    "sample_with_trace",
    # Repeated draws
    "DrawConfig",
    "DrawResult",
    "run_draws",
]
