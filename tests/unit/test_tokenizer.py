"""
Unit tests for the tokenizer
"""

import pytest

from mrcount.errors import EncodingError
from mrcount.partitioner import Partition
from mrcount.tokenizer import decode_record, map_partition, tokenize


class TestTokenize:
    """Tests for splitting a record into pairs"""

    def test_emits_one_pair_per_word(self):
        """Test that each token is emitted with count 1"""
        assert list(tokenize("hello hadoop hello")) == [
            ('hello', 1), ('hadoop', 1), ('hello', 1)
        ]

    def test_splits_on_any_whitespace_run(self):
        """Test tabs, repeated spaces and surrounding whitespace"""
        pairs = list(tokenize("  a\tb   c\r\n d  "))
        assert [word for word, _ in pairs] == ['a', 'b', 'c', 'd']

    def test_blank_record_emits_nothing(self):
        """Test that empty or whitespace-only lines produce no pairs"""
        assert list(tokenize("")) == []
        assert list(tokenize("   \t ")) == []

    def test_is_case_sensitive(self):
        """Test that no case folding is applied"""
        assert list(tokenize("Hello hello")) == [('Hello', 1), ('hello', 1)]

    def test_keeps_punctuation(self):
        """Test that punctuation stays attached to the token"""
        assert list(tokenize("dog. dog")) == [('dog.', 1), ('dog', 1)]

    def test_is_lazy(self):
        """Test that tokenize returns an iterator, not a list"""
        pairs = tokenize("a b")
        assert next(pairs) == ('a', 1)

    def test_decodes_utf8_bytes(self):
        """Test that bytes records are decoded before splitting"""
        assert list(tokenize("café olé".encode('utf-8'))) == [('café', 1), ('olé', 1)]


class TestDecodeErrors:
    """Tests for records that cannot be tokenized"""

    def test_invalid_utf8_raises_encoding_error(self):
        """Test that invalid bytes are reported with their record index"""
        with pytest.raises(EncodingError) as exc_info:
            list(tokenize(b'bad \xff byte', record_index=7, partition_index=2))

        assert exc_info.value.record_index == 7
        assert exc_info.value.partition_index == 2
        assert 'partition 2' in str(exc_info.value)

    def test_non_text_record_raises_encoding_error(self):
        """Test that records of other types are rejected"""
        with pytest.raises(EncodingError):
            decode_record(42, record_index=0)


class TestMapPartition:
    """Tests for mapping a whole partition"""

    def test_maps_records_in_order(self):
        """Test pairs from all records of a partition"""
        part = Partition(index=0, records=("a b", "c"), record_indices=(0, 1))
        assert list(map_partition(part)) == [('a', 1), ('b', 1), ('c', 1)]

    def test_reports_absolute_record_index(self):
        """Test that errors carry the input-wide record index"""
        part = Partition(index=1, records=("ok", b'\xfe'), record_indices=(4, 5))

        with pytest.raises(EncodingError) as exc_info:
            list(map_partition(part))

        assert exc_info.value.partition_index == 1
        assert exc_info.value.record_index == 5

    def test_stops_when_requested(self):
        """Test that should_stop is checked before each record"""
        part = Partition(index=0, records=("a", "b", "c"), record_indices=(0, 1, 2))
        seen = []

        def should_stop():
            return len(seen) >= 1

        for pair in map_partition(part, should_stop=should_stop):
            seen.append(pair)

        assert seen == [('a', 1)]
