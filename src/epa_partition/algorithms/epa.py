"""
Ewens-Pitman attraction (EPA) partition distribution.

Draws a random partition by visiting items in permutation order and placing
each one either in an existing cluster, with weight proportional to its
total similarity to that cluster's members, or in a new cluster, with weight
driven by the mass and discount.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Union

import numpy as np

from .clustering import Clustering
from .permutation import Permutation, PermutationStrategy, build_permutation
from .similarity import SquareMatrix, SquareMatrixView
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

RngLike = Union[np.random.Generator, int, None]


class DegenerateSimilarityError(ValueError):
    """A similarity the sampler divides by is zero."""


@dataclass(frozen=True)
class EpaParameters:
    """
    Validated inputs for one EPA draw.

    Attributes:
        similarity: View over the pairwise similarities
        permutation: Visiting order of the items
        mass: Propensity to open new clusters, must exceed -discount
        discount: New-cluster discount in [0, 1)
    """

    similarity: SquareMatrixView
    permutation: Permutation
    mass: float
    discount: float = 0.0

    def __post_init__(self):
        """Validate sizes, hyperparameters and similarity values."""
        if isinstance(self.similarity, SquareMatrix):
            object.__setattr__(self, "similarity", self.similarity.view())
        n_sim = self.similarity.n_items()
        n_perm = self.permutation.n_items()
        if n_sim != n_perm:
            raise ValueError(
                f"Similarity has {n_sim} items but permutation has {n_perm}"
            )
        if not 0.0 <= self.discount < 1.0:
            raise ValueError(f"discount must be in [0, 1), got {self.discount}")
        if not self.mass > -self.discount:
            raise ValueError(
                f"mass must be > -discount ({-self.discount}), got {self.mass}"
            )
        data = self.similarity.data()
        if not np.all(np.isfinite(data)):
            raise ValueError("similarity contains non-finite values")
        if np.any(data < 0):
            raise ValueError("similarity must be non-negative")

    @classmethod
    def new(
        cls,
        similarity: Union[SquareMatrixView, SquareMatrix],
        permutation: Permutation,
        mass: float,
        discount: float = 0.0,
    ) -> Optional["EpaParameters"]:
        """
        Build parameters, returning None when the item counts disagree.

        Other invalid inputs still raise ``ValueError``.
        """
        if similarity.n_items() != permutation.n_items():
            logger.warning(
                "EPA parameters rejected: similarity has %d items, permutation has %d",
                similarity.n_items(),
                permutation.n_items(),
            )
            return None
        return cls(similarity, permutation, mass, discount)

    def n_items(self) -> int:
        return self.similarity.n_items()

    def shuffle_permutation(
        self,
        rng: np.random.Generator,
        strategy: Optional[Union[str, PermutationStrategy]] = None,
    ) -> "EpaParameters":
        """
        Copy of these parameters with a freshly built permutation.

        Args:
            rng: NumPy random generator
            strategy: Permutation strategy; defaults to the configured one

        Returns:
            New EpaParameters sharing the similarity view
        """
        if strategy is None:
            from ..config import config

            strategy = config.permutation_strategy
        permutation = build_permutation(strategy, self.similarity, rng)
        return replace(self, permutation=permutation)


@dataclass
class StepRecord:
    """What happened when one item was placed."""

    step: int
    item: int
    jump_density: float
    n_clusters_before: int
    n_candidates: int
    label: int
    weight: float


@dataclass
class SampleTrace:
    """Diagnostics for a whole draw."""

    d2: float
    permutation: List[int]
    steps: List[StepRecord] = field(default_factory=list)


def _as_generator(rng: RngLike) -> np.random.Generator:
    # Seeds become generators; anything else is used as the generator itself
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    return rng


def adjacent_similarity_mean(
    similarity: SquareMatrixView, permutation: Permutation
) -> float:
    """
    Mean similarity between consecutive items of the cyclic visiting order.

    Sums ``similarity[(pi(i-1), pi(i))]`` for i = 0..n-1 with pi(-1) taken
    as pi(n-1), then divides by n.
    """
    n = permutation.n_items()
    if n == 0:
        raise ValueError("Cannot sample a partition of zero items")
    total = similarity[(permutation.get(n - 1), permutation.get(0))]
    for i in range(1, n):
        total += similarity.get_unchecked((permutation.get(i - 1), permutation.get(i)))
    return total / n


def sample(
    parameters: EpaParameters,
    rng: RngLike = None,
    observer: Optional[Callable[[StepRecord], None]] = None,
) -> Clustering:
    """
    Draw one partition from the EPA distribution.

    Items are placed in permutation order. At step i, with ``qt`` clusters
    already open and ``S`` the similarity of the item to everything placed
    so far:
    - new cluster weight: ``(mass + discount * qt) * d2 / sim(item, previous)``
    - existing cluster weight: ``(i - discount * qt) / S * sim(item, cluster)``
    where ``d2`` is the mean adjacent similarity along the cyclic order.

    Args:
        parameters: Validated EPA parameters
        rng: NumPy generator, or a seed passed to ``np.random.default_rng``
        observer: Optional callable receiving a ``StepRecord`` per item

    Returns:
        Clustering with every item allocated

    Raises:
        DegenerateSimilarityError: If an item has zero similarity to its
            predecessor in the order
        SelectionError: If the candidate weights cannot be sampled from
    """
    rng = _as_generator(rng)
    similarity = parameters.similarity
    permutation = parameters.permutation
    mass = parameters.mass
    discount = parameters.discount
    n = similarity.n_items()

    d2 = adjacent_similarity_mean(similarity, permutation)
    logger.debug("d2: %s", d2)

    clustering = Clustering.unallocated(n)
    for i in range(n):
        ii = permutation.get(i)
        if i == 0:
            jump_density = 1.0
        else:
            numerator = similarity.get_unchecked((ii, permutation.get(i - 1)))
            if numerator <= 0.0:
                raise DegenerateSimilarityError(
                    f"Item {ii} has similarity {numerator} to its predecessor "
                    f"{permutation.get(i - 1)}; adjacent similarities must be positive"
                )
            jump_density = d2 / numerator
        logger.debug("step %d item %d jump_density %s", i, ii, jump_density)

        qt = clustering.n_clusters()
        if i == 0:
            kt = 0.0
        else:
            # Positive: the predecessor is among the placed items
            placed_total = similarity.sum_of_row_subset(ii, permutation.slice_until(i))
            kt = (i - discount * qt) / placed_total

        candidates = clustering.available_labels_for_allocation_with_target(ii)
        labels_and_weights = []
        for label in candidates:
            if clustering.size_of(label) == 0:
                weight = (mass + discount * qt) * jump_density
            else:
                weight = kt * similarity.sum_of_row_subset(ii, clustering.items_of(label))
            labels_and_weights.append((label, weight))

        label, weight = Clustering.select(labels_and_weights, rng)
        clustering.allocate(ii, label)

        if observer is not None:
            observer(
                StepRecord(
                    step=i,
                    item=ii,
                    jump_density=jump_density,
                    n_clusters_before=qt,
                    n_candidates=len(candidates),
                    label=label,
                    weight=weight,
                )
            )

    return clustering


def sample_with_trace(
    parameters: EpaParameters, rng: RngLike = None
) -> tuple[Clustering, SampleTrace]:
    """
    Draw one partition and record the per-step diagnostics.

    Returns:
        Tuple of (clustering, trace)
    """
    rng = _as_generator(rng)
    trace = SampleTrace(
        d2=adjacent_similarity_mean(parameters.similarity, parameters.permutation),
        permutation=parameters.permutation.as_array().tolist(),
    )
    clustering = sample(parameters, rng, observer=trace.steps.append)
    return clustering, trace
