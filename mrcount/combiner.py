"""
Combiner (local pre-aggregation).
Folds the pairs emitted inside one partition into per-word subtotals
before they cross to the merge stage.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Dict, Iterable, Tuple


class CombinableAccumulator(ABC):
    """
    Subtotal operation shared by the combiner and the merger.

    Implementations must be associative and commutative: folding values in
    any order or grouping gives the same result. Per-partition combining and
    the cross-partition merge both rely on this.
    """

    @abstractmethod
    def identity(self):
        """Value of an empty subtotal"""

    @abstractmethod
    def add(self, subtotal, value):
        """Fold one emitted value into a subtotal"""

    @abstractmethod
    def merge(self, left, right):
        """Merge two subtotals"""


class SumAccumulator(CombinableAccumulator):
    """Integer addition"""

    def identity(self) -> int:
        return 0

    def add(self, subtotal: int, value: int) -> int:
        return subtotal + value

    def merge(self, left: int, right: int) -> int:
        return left + right


SUM = SumAccumulator()


def combine(pairs: Iterable[Tuple[str, int]],
            accumulator: CombinableAccumulator = SUM) -> Dict[str, int]:
    """
    Group one partition's pairs by word and fold their counts

    Args:
        pairs: (word, count) tuples from a single partition
        accumulator: Subtotal operation

    Returns:
        Dictionary mapping word to its subtotal within the partition
    """
    subtotals = defaultdict(accumulator.identity)
    for word, count in pairs:
        subtotals[word] = accumulator.add(subtotals[word], count)
    return dict(subtotals)


def combine_mappings(mappings: Iterable[Dict[str, int]],
                     accumulator: CombinableAccumulator = SUM) -> Dict[str, int]:
    """
    Combine already combined subtotal mappings into one.

    Inputs are left untouched.
    """
    combined: Dict[str, int] = {}
    for mapping in mappings:
        for word, subtotal in mapping.items():
            if word in combined:
                combined[word] = accumulator.merge(combined[word], subtotal)
            else:
                combined[word] = subtotal
    return combined
