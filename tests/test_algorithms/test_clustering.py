"""
Tests for partition state, weighted selection and partition metrics.
"""

import numpy as np
import pytest

from epa_partition.algorithms.clustering import (
    UNALLOCATED,
    Clustering,
    SelectionError,
    adjusted_rand_index,
    co_clustering_matrix,
    pairwise_ari,
)


# ------------------------------------------------------------------
# Clustering
# ------------------------------------------------------------------


def test_unallocated():
    """A fresh partition has no clusters and nothing allocated."""
    c = Clustering.unallocated(4)
    assert c.n_items == 4
    assert c.n_clusters() == 0
    assert c.n_allocated() == 0
    assert np.all(c.labels() == UNALLOCATED)
    assert c.available_labels_for_allocation_with_target(0) == [0]


def test_allocate_and_candidates():
    """Candidates are the active labels followed by one fresh label."""
    c = Clustering.unallocated(4)
    c.allocate(2, 0)
    c.allocate(0, 0)
    assert c.available_labels_for_allocation_with_target(1) == [0, 1]
    c.allocate(1, 1)
    assert c.available_labels_for_allocation_with_target(3) == [0, 1, 2]
    assert c.n_clusters() == 2
    assert c.size_of(0) == 2
    assert c.items_of(0) == [2, 0]
    assert c.size_of(3) == 0
    assert c.label_of(1) == 1
    assert c.as_dict() == {0: 0, 1: 1, 2: 0}


def test_allocate_twice_rejected():
    """Items cannot be allocated twice."""
    c = Clustering.unallocated(2)
    c.allocate(0, 0)
    with pytest.raises(ValueError, match="already allocated"):
        c.allocate(0, 1)
    with pytest.raises(ValueError, match="already allocated"):
        c.available_labels_for_allocation_with_target(0)


def test_standardize():
    """Labels are renumbered by first appearance."""
    c = Clustering.unallocated(4)
    c.allocate(3, 0)
    c.allocate(0, 1)
    c.allocate(1, 0)
    c.allocate(2, 1)
    np.testing.assert_array_equal(c.standardize(), [0, 1, 0, 1])
    assert c.is_complete()


# ------------------------------------------------------------------
# select
# ------------------------------------------------------------------


def test_select_single_candidate_takes_one_draw(uniforms_consumed):
    """A lone candidate is returned whatever its weight, after one draw."""
    gen = np.random.default_rng(8)
    assert Clustering.select([("a", -1.0)], gen) == ("a", -1.0)
    assert uniforms_consumed(gen, 8) == 1


def test_select_takes_one_draw(uniforms_consumed):
    """Choosing among several candidates uses exactly one uniform."""
    gen = np.random.default_rng(8)
    Clustering.select([("a", 1.0), ("b", 2.0), ("c", 3.0)], gen)
    assert uniforms_consumed(gen, 8) == 1


def test_select_matches_numpy_choice():
    """Selection is numpy's weighted choice over the normalized weights."""
    pairs = [("a", 1.0), ("b", 0.0), ("c", 3.0)]
    for seed in range(20):
        expected = np.random.default_rng(seed).choice(3, p=[0.25, 0.0, 0.75])
        assert Clustering.select(pairs, np.random.default_rng(seed)) == pairs[expected]


def test_select_never_picks_zero_weight(rng):
    """Zero-weight candidates are never chosen."""
    pairs = [("a", 1.0), ("b", 0.0), ("c", 1.0)]
    picks = {Clustering.select(pairs, rng)[0] for _ in range(500)}
    assert picks == {"a", "c"}


def test_select_proportions(rng):
    """Selection frequency follows the weights."""
    counts = {"a": 0, "b": 0}
    for _ in range(4000):
        label, _ = Clustering.select([("a", 1.0), ("b", 3.0)], rng)
        counts[label] += 1
    assert counts["a"] / 4000 == pytest.approx(0.25, abs=0.03)


@pytest.mark.parametrize(
    "pairs, match",
    [
        ([], "empty"),
        ([(0, 0.0), (1, 0.0)], "zero"),
        ([(0, -1.0), (1, 2.0)], "Invalid weight"),
        ([(0, float("nan")), (1, 2.0)], "Invalid weight"),
        ([(0, float("inf")), (1, 2.0)], "Invalid weight"),
    ],
)
def test_select_invalid_weights(rng, pairs, match):
    """Invalid weight sets raise SelectionError."""
    with pytest.raises(SelectionError, match=match):
        Clustering.select(pairs, rng)


# ------------------------------------------------------------------
# Metrics
# ------------------------------------------------------------------


def test_adjusted_rand_index_identical_up_to_relabeling():
    """ARI is 1.0 for the same partition under different labels."""
    assert adjusted_rand_index([0, 0, 1, 1], [5, 5, 2, 2]) == pytest.approx(1.0)


def test_adjusted_rand_index_disagreement():
    """Crossed partitions score below 1."""
    assert adjusted_rand_index([0, 0, 1, 1], [0, 1, 0, 1]) < 0.5


def test_adjusted_rand_index_shape_mismatch():
    """Label vectors must have equal length."""
    with pytest.raises(ValueError, match="differ"):
        adjusted_rand_index([0, 1], [0, 1, 2])


def test_pairwise_ari_count():
    """One score per unordered pair."""
    labels = [np.array([0, 0, 1]), np.array([0, 1, 1]), np.array([0, 0, 1])]
    aris = pairwise_ari(labels)
    assert len(aris) == 3
    assert aris[1] == pytest.approx(1.0)


def test_co_clustering_matrix():
    """Co-clustering counts the share of partitions pairing each two items."""
    labels = np.array([[0, 0, 1], [0, 1, 1]])
    psm = co_clustering_matrix(labels)
    np.testing.assert_allclose(np.diag(psm), 1.0)
    assert psm[0, 1] == pytest.approx(0.5)
    assert psm[1, 2] == pytest.approx(0.5)
    assert psm[0, 2] == pytest.approx(0.0)
    np.testing.assert_allclose(psm, psm.T)
