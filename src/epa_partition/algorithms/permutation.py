"""
Item orderings for sequential allocation.

Provides the ``Permutation`` container and three ways to build one:
uniform shuffling, a greedy nearest-neighbor path, and a randomized
nearest-neighbor path whose steps are weighted by similarity.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterator, List, Optional, Sequence

import numpy as np

from .clustering import Clustering
from .similarity import SquareMatrixView
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class PermutationStrategy(str, Enum):
    """How a permutation is constructed."""

    SHUFFLE = "shuffle"
    NEAREST = "nearest"
    RANDOM_NEAREST = "random-nearest"

    @classmethod
    def parse(cls, value: "str | PermutationStrategy") -> "PermutationStrategy":
        """
        Resolve a strategy name, accepting common aliases.

        Raises:
            ValueError: If the name is not recognized
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        aliases = {
            "shuffle": cls.SHUFFLE,
            "uniform-shuffle": cls.SHUFFLE,
            "uniform": cls.SHUFFLE,
            "nearest": cls.NEAREST,
            "random-nearest": cls.RANDOM_NEAREST,
            "randomnearest": cls.RANDOM_NEAREST,
        }
        if key not in aliases:
            raise ValueError(
                f"Unknown permutation strategy: {value!r}. "
                f"Expected one of {[s.value for s in cls]}"
            )
        return aliases[key]


class Permutation:
    """A bijective ordering of ``range(n_items)``."""

    __slots__ = ("_order",)

    def __init__(self, order: Sequence[int]):
        arr = np.asarray(order, dtype=np.intp).reshape(-1)
        n = arr.shape[0]
        seen = np.zeros(n, dtype=bool)
        for x in arr:
            if not 0 <= x < n or seen[x]:
                raise ValueError(f"Not a permutation of range({n}): {list(order)}")
            seen[x] = True
        arr.flags.writeable = False
        self._order = arr

    @classmethod
    def from_vector(cls, order: Sequence[int]) -> Optional["Permutation"]:
        """Like the constructor, but returns None for an invalid ordering."""
        try:
            return cls(order)
        except ValueError:
            return None

    @classmethod
    def natural(cls, n_items: int) -> "Permutation":
        return cls(np.arange(n_items))

    @classmethod
    def random(cls, n_items: int, rng: np.random.Generator) -> "Permutation":
        return cls(uniform_shuffle(n_items, rng))

    def n_items(self) -> int:
        return int(self._order.shape[0])

    def get(self, i: int) -> int:
        return int(self._order[i])

    def slice_until(self, i: int) -> np.ndarray:
        """The first *i* items of the ordering."""
        return self._order[:i]

    def as_array(self) -> np.ndarray:
        return self._order.copy()

    def shuffle(self, rng: np.random.Generator) -> "Permutation":
        """A fresh uniformly random permutation of the same size."""
        return Permutation.random(self.n_items(), rng)

    def __len__(self) -> int:
        return self.n_items()

    def __iter__(self) -> Iterator[int]:
        return (int(x) for x in self._order)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permutation):
            return NotImplemented
        return np.array_equal(self._order, other._order)

    def __repr__(self) -> str:
        return f"Permutation({self._order.tolist()})"


def _swap_remove(values: List[int], k: int) -> int:
    """Remove and return ``values[k]`` in O(1) by moving the last entry into its slot."""
    value = values[k]
    last = values.pop()
    if k < len(values):
        values[k] = last
    return value


def uniform_shuffle(n_items: int, rng: np.random.Generator) -> np.ndarray:
    """Uniformly random ordering of ``range(n_items)``."""
    return rng.permutation(n_items)


def nearest_neighbor(
    similarity: SquareMatrixView,
    rng: np.random.Generator,
    *,
    start: Optional[int] = None,
) -> Permutation:
    """
    Greedy nearest-neighbor path.

    Starts at a uniformly random item (or *start*) and repeatedly steps to
    the remaining item most similar to the current one. Ties go to the
    first candidate in the working set order.

    Args:
        similarity: Similarity view over the items
        rng: NumPy random generator, used once for the start item
        start: Fixed start item; no randomness is consumed when given

    Returns:
        Permutation visiting every item once
    """
    n = similarity.n_items()
    if n == 0:
        return Permutation([])
    available = list(range(n))
    if start is None:
        start = int(rng.integers(0, n))
    elif not 0 <= start < n:
        raise IndexError(f"start {start} out of range for n_items={n}")
    current = _swap_remove(available, start)
    order = [current]
    while available:
        best_value = -np.inf
        best_k = 0
        for k, candidate in enumerate(available):
            value = similarity.get_unchecked((current, candidate))
            if value > best_value:
                best_value = value
                best_k = k
        current = _swap_remove(available, best_k)
        order.append(current)
    logger.debug("nearest permutation: %s", order)
    return Permutation(order)


def random_nearest_neighbor(
    similarity: SquareMatrixView, rng: np.random.Generator
) -> Permutation:
    """
    Randomized nearest-neighbor path.

    Starts at a uniformly random item, then draws each next item from the
    remaining ones with probability proportional to its similarity to the
    current item.

    Raises:
        SelectionError: If the remaining similarities are all zero, or any
            is negative
    """
    n = similarity.n_items()
    if n == 0:
        return Permutation([])
    available = list(range(n))
    current = _swap_remove(available, int(rng.integers(0, n)))
    order = [current]
    while available:
        weights = (
            (k, similarity.get_unchecked((current, candidate)))
            for k, candidate in enumerate(available)
        )
        k, _ = Clustering.select(weights, rng)
        current = _swap_remove(available, k)
        order.append(current)
    logger.debug("random-nearest permutation: %s", order)
    return Permutation(order)


def build_permutation(
    strategy: "str | PermutationStrategy",
    similarity: SquareMatrixView,
    rng: np.random.Generator,
) -> Permutation:
    """
    Build a permutation over the items of *similarity* with *strategy*.

    Args:
        strategy: Strategy or its name (see ``PermutationStrategy.parse``)
        similarity: Similarity view; only read by the nearest strategies
        rng: NumPy random generator

    Returns:
        Permutation of ``range(similarity.n_items())``
    """
    strategy = PermutationStrategy.parse(strategy)
    if strategy is PermutationStrategy.NEAREST:
        return nearest_neighbor(similarity, rng)
    if strategy is PermutationStrategy.RANDOM_NEAREST:
        return random_nearest_neighbor(similarity, rng)
    return Permutation.random(similarity.n_items(), rng)
