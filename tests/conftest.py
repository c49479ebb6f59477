import numpy as np
import pytest

BLOB_CENTERS = np.array([[0.0, 0.0], [20.0, 0.0], [0.0, 20.0], [20.0, 20.0]])


def make_blobs(n=300, k=3, seed=1):
    rng = np.random.default_rng(seed)
    n_per = n // k
    Xs, ys = [], []
    for j in range(k):
        Xs.append(BLOB_CENTERS[j] + rng.normal(size=(n_per, 2)))
        ys.append(np.full(n_per, j))
    return np.vstack(Xs), np.hstack(ys)


def purity(y_true, y_pred):
    acc = 0
    for c in np.unique(y_pred):
        mask = y_pred == c
        if mask.any():
            vals, counts = np.unique(y_true[mask], return_counts=True)
            acc += counts.max()
    return float(acc / len(y_true))


def as_records(X):
    return {i: row for i, row in enumerate(X)}


@pytest.fixture
def two_clusters():
    return {
        "a0": [0.0, 0.0],
        "a1": [0.0, 1.0],
        "a2": [1.0, 0.0],
        "b0": [10.0, 10.0],
        "b1": [10.0, 11.0],
        "b2": [11.0, 10.0],
    }
