"""
Repeated EPA draws over one similarity matrix.

Provides configuration and orchestration for drawing many partitions, each
with its own permutation, and summarizing how consistently items cluster
together across draws.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .clustering import co_clustering_matrix, pairwise_ari
from .epa import EpaParameters, sample
from .permutation import Permutation, PermutationStrategy
from .similarity import SquareMatrix, SquareMatrixView
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class DrawConfig:
    """Configuration for a batch of EPA draws."""

    n_draws: int = 100
    mass: float = 1.0
    discount: float = 0.0
    strategy: Optional[Union[str, PermutationStrategy]] = None  # None -> EPA_PERMUTATION
    base_seed: int = 0
    compute_stability: bool = False


@dataclass
class DrawResult:
    """Results from a batch of EPA draws."""

    labels: np.ndarray
    n_clusters: np.ndarray
    co_clustering: np.ndarray
    permutations: List[List[int]] = field(default_factory=list)
    stability: Optional[Dict[str, Any]] = None


def run_draws(
    similarity: Union[SquareMatrix, SquareMatrixView], cfg: DrawConfig
) -> DrawResult:
    """
    Draw ``cfg.n_draws`` partitions from the EPA distribution.

    Pipeline:
    1. Validate the hyperparameters once against a natural ordering
    2. For each draw, rebuild the permutation with the configured strategy
       and sample a partition, all from one generator seeded with
       ``cfg.base_seed``
    3. Standardize labels and compute co-clustering frequencies
    4. Optionally compute pairwise ARI between draws

    Args:
        similarity: Similarity over the items
        cfg: DrawConfig with parameters

    Returns:
        DrawResult with the (n_draws, n_items) label matrix, cluster counts
        and co-clustering matrix

    Raises:
        ValueError: If n_draws < 1 or the EPA parameters are invalid
    """
    if cfg.n_draws < 1:
        raise ValueError(f"n_draws must be >= 1, got {cfg.n_draws}")

    strategy = cfg.strategy
    if strategy is None:
        from ..config import config

        strategy = config.permutation_strategy
    strategy = PermutationStrategy.parse(strategy)

    if isinstance(similarity, SquareMatrix):
        similarity = similarity.view()
    n_items = similarity.n_items()
    params = EpaParameters(
        similarity, Permutation.natural(n_items), cfg.mass, cfg.discount
    )
    rng = np.random.default_rng(cfg.base_seed)

    labels = np.empty((cfg.n_draws, n_items), dtype=int)
    n_clusters = np.empty(cfg.n_draws, dtype=int)
    permutations: List[List[int]] = []
    for draw in range(cfg.n_draws):
        params = params.shuffle_permutation(rng, strategy)
        clustering = sample(params, rng)
        labels[draw] = clustering.standardize()
        n_clusters[draw] = clustering.n_clusters()
        permutations.append(params.permutation.as_array().tolist())

    logger.info(
        "Drew %d partitions of %d items (strategy=%s, mean clusters=%.2f)",
        cfg.n_draws,
        n_items,
        strategy.value,
        float(n_clusters.mean()),
    )

    stability = None
    if cfg.compute_stability and cfg.n_draws > 1:
        aris = pairwise_ari(list(labels))
        stability = {
            "ari": {"mean": float(np.mean(aris)), "std": float(np.std(aris))},
            "n_clusters": {
                "mean": float(n_clusters.mean()),
                "std": float(n_clusters.std()),
            },
        }

    return DrawResult(
        labels=labels,
        n_clusters=n_clusters,
        co_clustering=co_clustering_matrix(labels),
        permutations=permutations,
        stability=stability,
    )
