"""
Pipeline configuration
"""

import os
from dataclasses import dataclass, asdict
from typing import Optional

from mrcount.errors import ConfigError

STRATEGIES = ('contiguous', 'round_robin')

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return None
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


@dataclass
class PipelineConfig:
    """Options recognized by the pipeline driver."""

    partition_count: int = 4
    per_partition_timeout: Optional[float] = None
    max_workers: Optional[int] = None
    strategy: str = 'contiguous'
    use_combiner: bool = True
    tree_merge: bool = False

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Build a config from MRCOUNT_* environment variables"""
        partitions = _env_optional_int('MRCOUNT_PARTITIONS')
        config = cls(
            partition_count=partitions if partitions is not None else cls.partition_count,
            per_partition_timeout=_env_optional_float('MRCOUNT_PARTITION_TIMEOUT'),
            max_workers=_env_optional_int('MRCOUNT_MAX_WORKERS'),
            strategy=os.getenv('MRCOUNT_STRATEGY', cls.strategy),
            use_combiner=_env_bool('MRCOUNT_USE_COMBINER', cls.use_combiner),
            tree_merge=_env_bool('MRCOUNT_TREE_MERGE', cls.tree_merge),
        )
        config.validate()
        return config

    @property
    def worker_count(self) -> int:
        """Number of pool threads; defaults to one per partition"""
        return self.max_workers or self.partition_count

    def validate(self):
        """
        Check option values

        Raises:
            ConfigError: If any option is out of range
        """
        if not isinstance(self.partition_count, int) or self.partition_count < 1:
            raise ConfigError(f"partition_count must be a positive integer, got {self.partition_count!r}")
        if self.per_partition_timeout is not None and self.per_partition_timeout <= 0:
            raise ConfigError(f"per_partition_timeout must be positive, got {self.per_partition_timeout!r}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers!r}")
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"Unknown partition strategy {self.strategy!r}, expected one of {STRATEGIES}")

    def to_dict(self) -> dict:
        return asdict(self)
