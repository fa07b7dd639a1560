"""
Word count with a combiner: tokenize, pre-aggregate per partition, merge.
"""

from mrcount.combiner import CombinableAccumulator, SumAccumulator, combine
from mrcount.config import PipelineConfig
from mrcount.errors import (
    ConfigError,
    EncodingError,
    InputReadError,
    MRCountError,
    PartitionTimeout,
    PipelineError,
)
from mrcount.merger import finalize, merge, reduce_pairs, tree_merge
from mrcount.pipeline import Pipeline, word_count
from mrcount.tokenizer import tokenize

__version__ = '0.1.0'
