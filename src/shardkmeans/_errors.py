class KMeansError(Exception):
    """Base class for every error raised while training or applying a model."""


class InvalidConfiguration(KMeansError, ValueError):
    """A clustering parameter is out of range for the given data."""


class EmptyDataset(InvalidConfiguration):
    """The dataset has no records to cluster."""


class DimensionMismatch(KMeansError, ValueError):
    """A feature vector does not have the expected number of features.

    Args:
        expected (int): The number of features the data or model has.
        actual (int): The number of features of the offending vector.
        key (object, optional): Key of the offending record, if known.
    """

    def __init__(self, expected: int, actual: int, key: object = None) -> None:
        self.expected = expected
        self.actual = actual
        self.key = key
        where = f" for record {key!r}" if key is not None else ""
        super().__init__(
            f"Expected a vector with {expected} features{where}, got {actual}."
        )


class PartitionFailure(KMeansError, RuntimeError):
    """A partition could not report its aggregate for the current iteration.

    Args:
        partition_index (int): Index of the failed partition.
        message (str): Description of the failure.
    """

    def __init__(self, partition_index: int, message: str) -> None:
        self.partition_index = partition_index
        super().__init__(f"Partition {partition_index} failed: {message}")


class Cancelled(KMeansError):
    """Training was cancelled between iterations."""
