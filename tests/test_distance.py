import numpy as np
import pytest

from shardkmeans._distance import (
    EuclideanDistance,
    ManhattanDistance,
    SquaredEuclideanDistance,
    pairwise_distances,
    resolve_distance,
)


def test_builtin_distances():
    a, b = np.array([0.0, 0.0]), np.array([3.0, 4.0])
    assert SquaredEuclideanDistance()(a, b) == 25.0
    assert EuclideanDistance()(a, b) == 5.0
    assert ManhattanDistance()(a, b) == 7.0
    assert SquaredEuclideanDistance()(a, a) == 0.0


@pytest.mark.parametrize(
    "distance", [SquaredEuclideanDistance(), EuclideanDistance(), ManhattanDistance()]
)
def test_pairwise_matches_scalar(distance):
    rng = np.random.default_rng(0)
    X, C = rng.normal(size=(7, 3)), rng.normal(size=(4, 3))
    D = pairwise_distances(X, C, distance)
    assert D.shape == (7, 4)
    for i in range(7):
        for j in range(4):
            assert D[i, j] == pytest.approx(distance(X[i], C[j]))


def test_plain_callable_is_evaluated_pairwise():
    def chebyshev(a, b):
        return float(np.max(np.abs(a - b)))

    X = np.array([[0.0, 0.0], [2.0, 5.0]])
    C = np.array([[1.0, 1.0]])
    np.testing.assert_array_equal(pairwise_distances(X, C, chebyshev), [[1.0], [4.0]])


def test_resolve_distance():
    assert isinstance(resolve_distance(None), SquaredEuclideanDistance)
    assert isinstance(resolve_distance("manhattan"), ManhattanDistance)
    with pytest.raises(ValueError):
        resolve_distance("cosine")
    with pytest.raises(ValueError):
        resolve_distance(42)
