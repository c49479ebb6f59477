import numpy as np
import pandas as pd
import pytest

from shardkmeans import (
    DimensionMismatch,
    EmptyDataset,
    InvalidConfiguration,
    PartitionedDataset,
    split_data,
)
from shardkmeans._dataset import as_partitioned_dataset


def test_split_data_is_a_disjoint_cover():
    df = pd.DataFrame(np.arange(20).reshape(10, 2), index=list("abcdefghij"))
    splits = split_data(df, num_splits=3, random_seed=0)
    assert len(splits) == 3
    keys = [key for split in splits for key in split.index]
    assert sorted(keys) == list("abcdefghij")
    assert [len(s) for s in splits] == [3, 3, 4]


def test_split_data_is_seeded():
    df = pd.DataFrame(np.arange(40).reshape(20, 2))
    first = split_data(df, num_splits=4, random_seed=7)
    second = split_data(df, num_splits=4, random_seed=7)
    for a, b in zip(first, second):
        assert list(a.index) == list(b.index)


def test_from_mapping_keeps_order_in_contiguous_partitions():
    records = {i: [float(i)] for i in range(5)}
    dataset = PartitionedDataset.from_mapping(records, n_partitions=2)
    assert dataset.n_partitions == 2
    assert [[key for key, _ in p] for p in dataset.partitions] == [[0, 1], [2, 3, 4]]
    assert len(dataset) == 5


def test_from_dataframe_uses_index_as_key():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0], "y": [4.0, 5.0, 6.0]}, index=[10, 20, 30])
    dataset = PartitionedDataset.from_dataframe(df, n_partitions=2, random_seed=1)
    records = dict(dataset)
    assert sorted(records) == [10, 20, 30]
    np.testing.assert_array_equal(records[20], [2.0, 5.0])


def test_duplicate_keys_are_rejected():
    with pytest.raises(InvalidConfiguration):
        PartitionedDataset([[("a", [1.0])], [("a", [2.0])]])


def test_no_partitions_is_empty():
    with pytest.raises(EmptyDataset):
        PartitionedDataset([])


def test_feature_partitions_shapes_and_read_only():
    dataset = PartitionedDataset(
        [[("a", [1.0, 2.0]), ("b", [3.0, 4.0])], [], [("c", [5.0, 6.0])]]
    )
    matrices = dataset.feature_partitions()
    assert [m.shape for m in matrices] == [(2, 2), (0, 2), (1, 2)]
    assert not matrices[0].flags.writeable


def test_feature_extractor_is_applied():
    dataset = PartitionedDataset.from_mapping({1: [9.0, 1.0, 2.0], 2: [8.0, 3.0, 4.0]})
    (matrix,) = dataset.feature_partitions(lambda key, row: row[1:])
    np.testing.assert_array_equal(matrix, [[1.0, 2.0], [3.0, 4.0]])


def test_first_dimension_mismatch_aborts_extraction():
    calls = []

    def extractor(key, row):
        calls.append(key)
        return row

    dataset = PartitionedDataset(
        [[("a", [1.0, 2.0])], [("b", [1.0, 2.0, 3.0]), ("c", [1.0, 2.0])]]
    )
    with pytest.raises(DimensionMismatch) as excinfo:
        dataset.feature_partitions(extractor)
    assert excinfo.value.key == "b"
    assert excinfo.value.expected == 2
    assert excinfo.value.actual == 3
    assert calls == ["a", "b"]


def test_labeled_records():
    dataset = PartitionedDataset.from_mapping({"x": [1.0, 0.5, 0.5]})
    (record,) = dataset.labeled_records(lambda k, r: r[1:], lambda k, r: r[0])
    assert record.key == "x"
    assert record.label == 1.0
    np.testing.assert_array_equal(record.features, [0.5, 0.5])


def test_as_partitioned_dataset_rejects_unknown_types():
    with pytest.raises(TypeError):
        as_partitioned_dataset([[1.0, 2.0]])
