"""Unit tests for Combiner."""

import pytest
from unittest.mock import Mock

from chunkvault.autosave.combiner import Combiner
from chunkvault.models.session import ChunkDescriptor


def make_chunks(gateway, session_id, payloads):
    chunks = []
    for index, data in enumerate(payloads):
        filename = f"{session_id}_chunk_{index:03d}.pcm"
        result = gateway.write_chunk(data, filename)
        chunks.append(ChunkDescriptor(filename=filename, file_path=result.file_path,
                                      size_bytes=len(data), chunk_index=index))
    return chunks


@pytest.mark.unit
class TestCombiner:

    def test_no_chunks_returns_trailing_buffer(self, memory_gateway):
        result = Combiner(memory_gateway).combine([], b"tail")

        assert result.audio_data == b"tail"
        assert result.complete is True

    def test_concatenates_in_index_order_then_trailing(self, memory_gateway, session):
        chunks = make_chunks(memory_gateway, session.session_id, [b"A" * 3, b"B" * 5, b"C" * 7])

        result = Combiner(memory_gateway).combine(list(reversed(chunks)), b"T" * 2)

        assert result.audio_data == b"AAA" + b"BBBBB" + b"CCCCCCC" + b"TT"
        assert result.size_bytes == 3 + 5 + 7 + 2
        assert result.loaded_indices == [0, 1, 2]
        assert result.complete is True

    def test_skips_chunk_that_fails_to_load(self, memory_gateway, session):
        chunks = make_chunks(memory_gateway, session.session_id, [b"zero", b"one", b"two"])
        memory_gateway.fail_reads.add(chunks[1].file_path)

        result = Combiner(memory_gateway).combine(chunks, b"-tail")

        assert result.audio_data == b"zerotwo-tail"
        assert result.loaded_indices == [0, 2]
        assert result.skipped_indices == [1]
        assert result.used_fallback is False
        assert result.complete is False

    def test_all_chunks_unreadable_still_returns_trailing(self, memory_gateway, session):
        chunks = make_chunks(memory_gateway, session.session_id, [b"x", b"y"])
        memory_gateway.fail_reads.update(c.file_path for c in chunks)

        result = Combiner(memory_gateway).combine(chunks, b"tail")

        assert result.audio_data == b"tail"
        assert result.skipped_indices == [0, 1]

    def test_total_failure_falls_back_to_trailing(self, session):
        gateway = Mock()
        gateway.read_chunk.return_value = "not bytes"
        chunks = [ChunkDescriptor(filename="a", file_path="/a", size_bytes=1, chunk_index=0)]

        result = Combiner(gateway).combine(chunks, b"tail")

        assert result.audio_data == b"tail"
        assert result.used_fallback is True
        assert result.error
