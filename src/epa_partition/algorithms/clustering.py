"""
Partition state and partition comparison metrics.

Provides the incrementally built ``Clustering`` used by the EPA sampler, the
weighted random selection primitive, and agreement metrics between
partitions (ARI, co-clustering frequencies).
"""

from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Tuple, TypeVar

import numpy as np

T = TypeVar("T", bound=Hashable)

UNALLOCATED = -1


class SelectionError(ValueError):
    """Weighted selection was asked to choose from an invalid weight set."""


class Clustering:
    """
    Mutable assignment of items to cluster labels.

    Labels are non-negative integers. An empty label is reused as the
    "new cluster" label, so labels stay in ``[0, n_items)``.
    """

    def __init__(self, n_items: int):
        if n_items < 0:
            raise ValueError(f"n_items must be >= 0, got {n_items}")
        self._labels: List[int] = [UNALLOCATED] * n_items
        self._members: List[List[int]] = [[] for _ in range(n_items)]
        self._n_clusters = 0
        self._n_allocated = 0

    @classmethod
    def unallocated(cls, n_items: int) -> "Clustering":
        """Empty partition over *n_items* items with no clusters."""
        return cls(n_items)

    @property
    def n_items(self) -> int:
        return len(self._labels)

    def n_clusters(self) -> int:
        """Number of nonempty clusters."""
        return self._n_clusters

    def n_allocated(self) -> int:
        return self._n_allocated

    def is_complete(self) -> bool:
        return self._n_allocated == self.n_items

    def size_of(self, label: int) -> int:
        if 0 <= label < len(self._members):
            return len(self._members[label])
        return 0

    def items_of(self, label: int) -> List[int]:
        """Items in cluster *label*, in allocation order."""
        if 0 <= label < len(self._members):
            return list(self._members[label])
        return []

    def label_of(self, item: int) -> int:
        """Label of *item*, or ``UNALLOCATED``."""
        return self._labels[item]

    def active_labels(self) -> List[int]:
        return [k for k, members in enumerate(self._members) if members]

    def new_label(self) -> int:
        """Smallest label whose cluster is empty."""
        for k, members in enumerate(self._members):
            if not members:
                return k
        raise ValueError("No empty label left; every item is its own cluster")

    def available_labels_for_allocation_with_target(self, target_item: int) -> List[int]:
        """
        Candidate labels for placing *target_item*.

        Every nonempty label in ascending order, followed by exactly one
        fresh label.

        Raises:
            IndexError: If target_item is out of range
            ValueError: If target_item is already allocated
        """
        if not 0 <= target_item < self.n_items:
            raise IndexError(f"Item {target_item} out of range for n_items={self.n_items}")
        if self._labels[target_item] != UNALLOCATED:
            raise ValueError(f"Item {target_item} is already allocated")
        return self.active_labels() + [self.new_label()]

    def allocate(self, item: int, label: int) -> None:
        """
        Put an unallocated *item* into cluster *label*.

        Allocating to an empty label opens a new cluster.
        """
        if not 0 <= item < self.n_items:
            raise IndexError(f"Item {item} out of range for n_items={self.n_items}")
        if not 0 <= label < self.n_items:
            raise IndexError(f"Label {label} out of range for n_items={self.n_items}")
        if self._labels[item] != UNALLOCATED:
            raise ValueError(f"Item {item} is already allocated to {self._labels[item]}")
        if not self._members[label]:
            self._n_clusters += 1
        self._members[label].append(item)
        self._labels[item] = label
        self._n_allocated += 1

    def labels(self) -> np.ndarray:
        """Label per item (``UNALLOCATED`` where not yet placed)."""
        return np.asarray(self._labels, dtype=int)

    def as_dict(self) -> Dict[int, int]:
        """Mapping from allocated item to its label."""
        return {i: k for i, k in enumerate(self._labels) if k != UNALLOCATED}

    def standardize(self) -> np.ndarray:
        """Labels renumbered 0, 1, 2, ... in order of first appearance by item."""
        mapping: Dict[int, int] = {}
        out = np.full(self.n_items, UNALLOCATED, dtype=int)
        for i, k in enumerate(self._labels):
            if k == UNALLOCATED:
                continue
            if k not in mapping:
                mapping[k] = len(mapping)
            out[i] = mapping[k]
        return out

    def __repr__(self) -> str:
        return (
            f"Clustering(n_items={self.n_items}, n_clusters={self._n_clusters}, "
            f"n_allocated={self._n_allocated})"
        )

    @staticmethod
    def select(
        candidates_and_weights: Iterable[Tuple[T, float]],
        rng: np.random.Generator,
    ) -> Tuple[T, float]:
        """
        Draw one candidate with probability proportional to its weight.

        Exactly one uniform draw is taken from *rng* per call. A lone
        candidate still consumes its draw and is returned whatever its
        weight, so the first item of a partition is always placeable.

        Args:
            candidates_and_weights: (candidate, weight) pairs
            rng: NumPy random generator

        Returns:
            The chosen ``(candidate, weight)`` pair

        Raises:
            SelectionError: If there are no candidates, a weight is negative
                or not finite, or all weights are zero
        """
        pairs = list(candidates_and_weights)
        if not pairs:
            raise SelectionError("Cannot select from an empty candidate set")
        if len(pairs) == 1:
            rng.random()
            return pairs[0]

        weights = np.asarray([w for _, w in pairs], dtype=np.float64)
        bad = ~np.isfinite(weights) | (weights < 0.0)
        if bad.any():
            k = int(np.argmax(bad))
            raise SelectionError(
                f"Invalid weight {pairs[k][1]!r} for candidate {pairs[k][0]!r}; "
                "weights must be finite and non-negative"
            )
        total = weights.sum()
        if total <= 0.0:
            raise SelectionError("All candidate weights are zero")

        probs = weights / total
        return pairs[int(rng.choice(len(pairs), p=probs))]


def adjusted_rand_index(labels_a: np.ndarray, labels_b: np.ndarray) -> float:
    """
    Compute Adjusted Rand Index between two partitions.

    ARI measures agreement between two partitions, adjusted for chance.
    Returns 1.0 for identical partitions (up to relabeling), ~0.0 for random
    agreement.

    Args:
        labels_a: First partition labels
        labels_b: Second partition labels

    Returns:
        ARI score in [-1, 1], typically in [0, 1]

    Raises:
        ValueError: If the label vectors differ in length
    """
    labels_a = np.asarray(labels_a)
    labels_b = np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        raise ValueError(
            f"Label vectors differ in shape: {labels_a.shape} vs {labels_b.shape}"
        )
    n = len(labels_a)
    if n < 2:
        return 1.0
    _, a = np.unique(labels_a, return_inverse=True)
    _, b = np.unique(labels_b, return_inverse=True)

    contingency = np.zeros((a.max() + 1, b.max() + 1), dtype=np.int64)
    np.add.at(contingency, (a, b), 1)

    def pairs(counts: np.ndarray) -> float:
        return float((counts * (counts - 1) / 2.0).sum())

    sum_comb = pairs(contingency)
    sum_comb_a = pairs(contingency.sum(axis=1))
    sum_comb_b = pairs(contingency.sum(axis=0))
    comb_n = n * (n - 1) / 2.0

    expected_index = (sum_comb_a * sum_comb_b) / comb_n
    max_index = 0.5 * (sum_comb_a + sum_comb_b)
    denom = max_index - expected_index
    if denom == 0:
        return 1.0
    return float((sum_comb - expected_index) / denom)


def pairwise_ari(labels_list: List[np.ndarray]) -> List[float]:
    """ARI for every pair (i, j), i < j, of the given partitions."""
    aris = []
    for i in range(len(labels_list)):
        for j in range(i + 1, len(labels_list)):
            aris.append(adjusted_rand_index(labels_list[i], labels_list[j]))
    return aris


def co_clustering_matrix(label_matrix: np.ndarray) -> np.ndarray:
    """
    Fraction of partitions in which each pair of items shares a cluster.

    Args:
        label_matrix: (n_partitions, n_items) integer labels

    Returns:
        (n_items, n_items) symmetric matrix with ones on the diagonal
    """
    label_matrix = np.asarray(label_matrix)
    if label_matrix.ndim != 2 or label_matrix.shape[0] == 0:
        raise ValueError(
            f"label_matrix must be (n_partitions, n_items) with n_partitions >= 1, "
            f"got shape {label_matrix.shape}"
        )
    n_partitions, n_items = label_matrix.shape
    counts = np.zeros((n_items, n_items), dtype=np.float64)
    for row in label_matrix:
        counts += row[:, None] == row[None, :]
    return counts / n_partitions
