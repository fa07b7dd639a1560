"""
Exception types raised by the word count pipeline.
"""

from typing import Optional


class MRCountError(Exception):
    """Base class for all pipeline errors"""


class ConfigError(MRCountError):
    """Invalid pipeline configuration"""


class InputReadError(MRCountError):
    """Input source could not be read"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read input {path}: {reason}")


class OutputWriteError(MRCountError):
    """Output destination could not be written"""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write output {path}: {reason}")


class EncodingError(MRCountError):
    """A record could not be decoded for tokenizing"""

    def __init__(self, record_index: int, partition_index: Optional[int] = None,
                 reason: str = ''):
        self.record_index = record_index
        self.partition_index = partition_index
        self.reason = reason
        where = f"record {record_index}"
        if partition_index is not None:
            where = f"partition {partition_index}, {where}"
        message = f"Cannot decode {where}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class PartitionTimeout(MRCountError):
    """A partition exceeded its time budget"""

    def __init__(self, partition_index: int, timeout: float):
        self.partition_index = partition_index
        self.timeout = timeout
        super().__init__(f"Partition {partition_index} exceeded timeout of {timeout}s")


class PipelineError(MRCountError):
    """
    Aggregate failure of a pipeline run.

    Raised once per failed run; the error that aborted the run is chained
    as __cause__.
    """

    def __init__(self, partition_index: int, message: str,
                 record_index: Optional[int] = None):
        self.partition_index = partition_index
        self.record_index = record_index
        where = f"partition {partition_index}"
        if record_index is not None:
            where += f", record {record_index}"
        super().__init__(f"Run aborted at {where}: {message}")
