"""
Input partitioning.
Splits the input records into disjoint partitions, one per worker task.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple, Union

Record = Union[str, bytes]


@dataclass(frozen=True)
class Partition:
    """
    An ordered slice of input records owned by one worker.

    Attributes:
        index: Partition number, 0-based
        records: Records assigned to this partition, in input order
        record_indices: Absolute input index of each record
    """

    index: int
    records: Tuple[Record, ...]
    record_indices: Tuple[int, ...]

    def __len__(self):
        return len(self.records)


def contiguous(records: Sequence[Record], partition_count: int) -> List[Partition]:
    """
    Split records into contiguous chunks whose sizes differ by at most one

    Args:
        records: Full input
        partition_count: Maximum number of partitions

    Returns:
        Non-empty partitions covering the whole input
    """
    total = len(records)
    count = min(partition_count, total)
    partitions = []
    start = 0
    for index in range(count):
        size = total // count + (1 if index < total % count else 0)
        end = start + size
        partitions.append(Partition(
            index=index,
            records=tuple(records[start:end]),
            record_indices=tuple(range(start, end)),
        ))
        start = end
    return partitions


def round_robin(records: Sequence[Record], partition_count: int) -> List[Partition]:
    """
    Deal records across partitions: record i goes to partition i mod n

    Args:
        records: Full input
        partition_count: Maximum number of partitions

    Returns:
        Non-empty partitions covering the whole input
    """
    count = min(partition_count, len(records))
    return [
        Partition(
            index=index,
            records=tuple(records[index::count]),
            record_indices=tuple(range(index, len(records), count)),
        )
        for index in range(count)
    ]


STRATEGIES = {
    'contiguous': contiguous,
    'round_robin': round_robin,
}


def partition(records: Sequence[Record], partition_count: int,
              strategy: str = 'contiguous') -> List[Partition]:
    """Partition records with the named strategy"""
    if partition_count < 1:
        raise ValueError(f"partition_count must be positive, got {partition_count}")
    try:
        split = STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown partition strategy: {strategy}")
    return split(records, partition_count)
