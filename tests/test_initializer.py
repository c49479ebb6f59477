import numpy as np
import pytest

from shardkmeans import EmptyDataset, InvalidConfiguration, initialize_clusters


def _data(n=20, d=3):
    return np.arange(n * d, dtype=float).reshape(n, d)


def test_random_init_follows_the_injected_generator():
    data = _data()
    centroids = initialize_clusters(data, 4, np.random.default_rng(0))
    expected = np.random.default_rng(0).choice(20, size=4, replace=False)
    np.testing.assert_array_equal(centroids, data[expected])


def test_same_seed_same_centroids():
    data = _data()
    for init in ("random", "k-means++"):
        a = initialize_clusters(data, 5, 42, init=init)
        b = initialize_clusters(data, 5, 42, init=init)
        np.testing.assert_array_equal(a, b)


def test_centroids_are_distinct_records():
    data = _data()
    for init in ("random", "k-means++"):
        centroids = initialize_clusters(data, 6, 3, init=init)
        rows = {tuple(row) for row in data}
        assert len({tuple(c) for c in centroids}) == 6
        assert all(tuple(c) in rows for c in centroids)
        assert not centroids.flags.writeable


def test_k_equal_to_dataset_size_uses_every_record():
    data = _data(n=5)
    centroids = initialize_clusters(data, 5, 1)
    assert sorted(map(tuple, centroids)) == sorted(map(tuple, data))


def test_invalid_k_and_empty_data():
    with pytest.raises(InvalidConfiguration):
        initialize_clusters(_data(n=3), 4, 0)
    with pytest.raises(InvalidConfiguration):
        initialize_clusters(_data(n=3), 0, 0)
    with pytest.raises(EmptyDataset):
        initialize_clusters(np.empty((0, 2)), 1, 0)
    with pytest.raises(TypeError):
        initialize_clusters([[1.0]], 1, 0)
