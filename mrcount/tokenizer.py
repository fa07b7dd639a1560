"""
Tokenizer (map stage).
Turns each input record into (word, 1) pairs.
"""

from typing import Callable, Iterator, Optional, Tuple

from mrcount.errors import EncodingError
from mrcount.partitioner import Partition, Record

Pair = Tuple[str, int]


def decode_record(record: Record, record_index: int,
                  partition_index: Optional[int] = None) -> str:
    """
    Return the text of a record, decoding raw bytes as strict UTF-8

    Raises:
        EncodingError: If the bytes are not valid UTF-8
    """
    if isinstance(record, bytes):
        try:
            return record.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingError(record_index, partition_index, str(e)) from e
    if not isinstance(record, str):
        raise EncodingError(record_index, partition_index,
                            f"expected str or bytes, got {type(record).__name__}")
    return record


def tokenize(record: Record, record_index: int = 0,
             partition_index: Optional[int] = None) -> Iterator[Pair]:
    """
    Emit (word, 1) for each whitespace-delimited token in the record.

    Tokens are taken exactly as they appear: no case folding and no
    punctuation stripping.

    Args:
        record: One line of input
        record_index: Position of the record in the input, for error reports
        partition_index: Owning partition, for error reports

    Yields:
        (word, 1) tuples in record order
    """
    text = decode_record(record, record_index, partition_index)
    for word in text.split():
        yield (word, 1)


def map_partition(partition: Partition,
                  should_stop: Optional[Callable[[], bool]] = None) -> Iterator[Pair]:
    """
    Tokenize every record of a partition in order

    Args:
        partition: Partition to map
        should_stop: Checked before each record; mapping ends early when it returns True

    Yields:
        (word, 1) tuples for the whole partition
    """
    for record, record_index in zip(partition.records, partition.record_indices):
        if should_stop is not None and should_stop():
            return
        yield from tokenize(record, record_index, partition.index)
