"""
Unit tests for the size classifier.

Includes property-based testing with hypothesis for the chunk predicate.
"""

from datetime import datetime, timezone

import pytest
from hypothesis import given
from hypothesis import strategies as st

from deatomize.core.models import Outcome, Record
from deatomize.core.stages import CHUNK_SIZE, SizeClassifier, is_chunked


def record_with_size(size: int, identifier: str = "018edb0f") -> Record:
    return Record(
        identifier=identifier,
        observed_at=datetime(2020, 6, 16, tzinfo=timezone.utc),
    ).with_metadata(f"/eos/u/{identifier}", size)


class TestIsChunked:
    """Tests for the chunk predicate"""

    def test_chunk_size_is_ten_decimal_megabytes(self):
        assert CHUNK_SIZE == 10_000_000

    def test_boundaries(self):
        assert is_chunked(0)
        assert is_chunked(10_000_000)
        assert is_chunked(30_000_000)
        assert not is_chunked(9_999_999)
        assert not is_chunked(10_000_001)
        assert not is_chunked(12_345_678)
        assert not is_chunked(10 * 1024 * 1024)

    @given(st.integers(min_value=0, max_value=10**15))
    def test_property_matches_modulo(self, size):
        """Property test: chunked iff size is a multiple of the unit"""
        assert is_chunked(size) == (size % 10_000_000 == 0)

    @given(st.integers(min_value=0, max_value=10**8))
    def test_property_multiples_are_chunked(self, n):
        assert is_chunked(n * CHUNK_SIZE)

    def test_custom_unit(self):
        assert is_chunked(4096, unit=1024)
        assert not is_chunked(4097, unit=1024)


class TestSizeClassifier:
    """Tests for SizeClassifier"""

    def test_partitions_records(self):
        records = [
            record_with_size(30_000_000, "a"),
            record_with_size(12_345_678, "b"),
            record_with_size(20_000_000, "c"),
        ]
        classification = SizeClassifier().classify(records)

        assert [r.identifier for r in classification.chunked] == ["a", "c"]
        assert [r.identifier for r in classification.not_chunked] == ["b"]

    def test_chunked_records_await_resolution(self):
        classification = SizeClassifier().classify([record_with_size(30_000_000)])
        record = classification.chunked[0]
        assert record.examined is True
        assert record.outcome is None

    def test_not_chunked_is_terminal(self):
        classification = SizeClassifier().classify([record_with_size(12_345_678)])
        record = classification.not_chunked[0]
        assert record.examined is True
        assert record.outcome is Outcome.NASTY_NOT_CHUNK
        assert record.versions_loaded is False

    def test_invalid_unit_rejected(self):
        with pytest.raises(ValueError):
            SizeClassifier(unit=0)
