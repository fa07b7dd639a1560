"""
Unit tests for the combiner
"""

import random

from mrcount.combiner import (
    CombinableAccumulator,
    SumAccumulator,
    combine,
    combine_mappings,
)


class TestSumAccumulator:
    """Tests for the integer-sum accumulator"""

    def test_is_a_combinable_accumulator(self):
        """Test that SumAccumulator implements the capability"""
        assert isinstance(SumAccumulator(), CombinableAccumulator)

    def test_identity_and_add(self):
        """Test folding values from the identity"""
        acc = SumAccumulator()
        assert acc.add(acc.add(acc.identity(), 1), 2) == 3

    def test_merge_is_associative_and_commutative(self):
        """Test the algebraic contract the merge relies on"""
        acc = SumAccumulator()
        a, b, c = 3, 5, 11
        assert acc.merge(acc.merge(a, b), c) == acc.merge(a, acc.merge(b, c))
        assert acc.merge(a, b) == acc.merge(b, a)


class TestCombine:
    """Tests for per-partition pre-aggregation"""

    def test_sums_counts_per_word(self):
        """Test grouping pairs by word"""
        pairs = [('hello', 1), ('hadoop', 1), ('hello', 1), ('hello', 1)]
        assert combine(pairs) == {'hello': 3, 'hadoop': 1}

    def test_reduces_pair_volume(self):
        """Test that the output has one entry per distinct word"""
        pairs = [('a', 1)] * 50 + [('b', 1)] * 50
        assert len(combine(pairs)) == 2

    def test_empty_input(self):
        """Test that no pairs combine to an empty mapping"""
        assert combine([]) == {}

    def test_accepts_counts_above_one(self):
        """Test combining already partially summed pairs"""
        assert combine([('a', 2), ('a', 5)]) == {'a': 7}

    def test_returns_plain_dict(self):
        """Test that the result does not default missing words"""
        result = combine([('a', 1)])
        assert type(result) is dict
        assert 'b' not in result

    def test_combining_sub_chunks_equals_combining_once(self):
        """Test that repeated combining over sub-chunks changes nothing"""
        rng = random.Random(7)
        pairs = [(rng.choice('abcdefg'), 1) for _ in range(500)]

        once = combine(pairs)
        chunked = combine_mappings(combine(pairs[i:i + 37]) for i in range(0, len(pairs), 37))

        assert chunked == once


class TestCombineMappings:
    """Tests for combining already combined mappings"""

    def test_does_not_modify_inputs(self):
        """Test that input mappings are left untouched"""
        first = {'a': 1, 'b': 2}
        second = {'a': 3}

        assert combine_mappings([first, second]) == {'a': 4, 'b': 2}
        assert first == {'a': 1, 'b': 2}
        assert second == {'a': 3}
