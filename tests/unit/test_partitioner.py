"""
Unit tests for the partitioner
"""

import pytest

from mrwordfreq.coordinator.partitioner import Chunk, plan
from mrwordfreq.errors import ConfigurationError


def assert_covers(chunks, file_size, chunk_size):
    """Chunks are in index order, contiguous, and cover [0, file_size)"""
    offset = 0
    for i, chunk in enumerate(chunks):
        assert chunk.index == i
        assert chunk.offset == offset
        assert 0 < chunk.length <= chunk_size
        if i < len(chunks) - 1:
            assert chunk.length == chunk_size
        offset = chunk.end
    assert offset == file_size


class TestPlan:
    """Tests for chunk layout"""

    def test_exact_multiple(self):
        chunks = plan(1000, 250)
        assert chunks == [
            Chunk(0, 0, 250),
            Chunk(1, 250, 250),
            Chunk(2, 500, 250),
            Chunk(3, 750, 250),
        ]

    def test_last_chunk_is_shorter(self):
        chunks = plan(1001, 250)
        assert len(chunks) == 5
        assert chunks[-1] == Chunk(4, 1000, 1)

    def test_chunk_larger_than_file(self):
        assert plan(25, 1024) == [Chunk(0, 0, 25)]

    def test_empty_file_yields_no_chunks(self):
        assert plan(0, 4) == []

    @pytest.mark.parametrize("file_size", [1, 3, 4, 5, 7, 8, 9, 63, 64, 65, 1000])
    @pytest.mark.parametrize("chunk_size", [1, 2, 4, 7, 64])
    def test_coverage(self, file_size, chunk_size):
        chunks = plan(file_size, chunk_size)
        assert len(chunks) == -(-file_size // chunk_size)
        assert_covers(chunks, file_size, chunk_size)

    def test_deterministic(self):
        assert plan(12345, 100) == plan(12345, 100)

    @pytest.mark.parametrize("chunk_size", [0, -1, 2.5, "4", True, None])
    def test_rejects_invalid_chunk_size(self, chunk_size):
        with pytest.raises(ConfigurationError):
            plan(100, chunk_size)

    def test_rejects_negative_file_size(self):
        with pytest.raises(ConfigurationError):
            plan(-1, 10)

    def test_chunks_are_immutable(self):
        chunk = plan(10, 5)[0]
        with pytest.raises(AttributeError):
            chunk.offset = 3
