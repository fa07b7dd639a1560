"""
Merger (reduce stage).
Aggregates per-partition subtotals by word into final totals.
"""

from typing import Dict, Iterable, List, Sequence, Tuple

from mrcount.combiner import SUM, CombinableAccumulator, combine, combine_mappings

FinalCount = Tuple[str, int]


def merge(partials: Iterable[Dict[str, int]],
          accumulator: CombinableAccumulator = SUM) -> Dict[str, int]:
    """
    Sum subtotals across all partitions, grouped by word

    Args:
        partials: One word -> subtotal mapping per partition
        accumulator: Subtotal operation

    Returns:
        Dictionary mapping word to total; inputs are not modified
    """
    return combine_mappings(partials, accumulator)


def tree_merge(partials: Sequence[Dict[str, int]],
               accumulator: CombinableAccumulator = SUM) -> Dict[str, int]:
    """Pairwise reduction of the partials; same result as merge()"""
    level = list(partials)
    if not level:
        return {}
    while len(level) > 1:
        next_level = []
        for i in range(0, len(level), 2):
            next_level.append(combine_mappings(level[i:i + 2], accumulator))
        level = next_level
    # A single partial is copied so callers never share it with the result
    return dict(level[0])


def reduce_pairs(pairs: Iterable[Tuple[str, int]],
                 accumulator: CombinableAccumulator = SUM) -> Dict[str, int]:
    """Group ungrouped (word, count) pairs directly by word"""
    return combine(pairs, accumulator)


def finalize(totals: Dict[str, int]) -> List[FinalCount]:
    """
    Order totals for output

    Returns:
        (word, total) tuples sorted by word, zero totals dropped
    """
    return [(word, total) for word, total in sorted(totals.items()) if total > 0]
