"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest

from epa_partition.algorithms.similarity import SquareMatrix


@pytest.fixture
def rng():
    """Seeded NumPy generator so every test is reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def line_similarity():
    """
    Four items at positions 0, 1, 2, 3 on a line.

    Similarity is exp(-|i - j|), so each item's nearest neighbors are the
    adjacent positions.
    """
    pos = np.arange(4, dtype=float)
    return SquareMatrix.from_array(np.exp(-np.abs(pos[:, None] - pos[None, :])))


@pytest.fixture
def random_similarity():
    """Strictly positive symmetric similarity over 12 items."""
    gen = np.random.default_rng(7)
    X = gen.standard_normal((12, 3))
    dist = np.linalg.norm(X[:, None, :] - X[None, :, :], axis=2)
    return SquareMatrix.from_array(np.exp(-dist))


def _uniforms_consumed(gen, seed, limit=1000):
    """
    Number of uniform doubles *gen* has drawn since it was seeded with *seed*.

    Compares the next value of *gen* against a fresh stream from the same seed.
    """
    upcoming = gen.random()
    reference = np.random.default_rng(seed).random(limit)
    matches = np.flatnonzero(reference == upcoming)
    assert matches.size, "generator advanced past the reference stream"
    return int(matches[0])


@pytest.fixture
def uniforms_consumed():
    """Counts uniform draws taken from a seeded generator."""
    return _uniforms_consumed
