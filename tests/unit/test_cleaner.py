"""Unit tests for Cleaner."""

import pytest

from chunkvault.autosave.chunk_writer import ChunkWriter
from chunkvault.autosave.cleaner import Cleaner


def write_chunks(gateway, session, count):
    writer = ChunkWriter(gateway, session)
    for i in range(count):
        writer.append(bytes([i]) * 8)
        writer.flush()
    return list(session.saved_chunks)


@pytest.mark.unit
class TestCleaner:

    def test_all_deleted_resets_session(self, memory_gateway, session):
        write_chunks(memory_gateway, session, 3)

        result = Cleaner(memory_gateway).cleanup(session)

        assert result.success is True
        assert result.session_reset is True
        assert len(result.deleted) == 3
        assert session.session_id is None
        assert session.chunk_index == 0
        assert session.saved_chunks == []
        assert memory_gateway.files == {}

    def test_partial_failure_retains_only_failed_chunks(self, memory_gateway, session):
        chunks = write_chunks(memory_gateway, session, 2)
        memory_gateway.fail_deletes.add(chunks[1].file_path)
        session_id = session.session_id

        result = Cleaner(memory_gateway).cleanup(session)

        assert result.success is False
        assert result.session_reset is False
        assert result.deleted == [chunks[0]]
        assert session.saved_chunks == [chunks[1]]
        assert session.session_id == session_id
        assert session.chunk_index == 2

    def test_every_chunk_is_attempted_after_a_failure(self, memory_gateway, session):
        chunks = write_chunks(memory_gateway, session, 3)
        memory_gateway.fail_deletes.add(chunks[0].file_path)

        Cleaner(memory_gateway).cleanup(session)

        assert memory_gateway.delete_calls == [c.file_path for c in chunks]

    def test_retry_deletes_remainder(self, memory_gateway, session):
        chunks = write_chunks(memory_gateway, session, 2)
        memory_gateway.fail_deletes.add(chunks[1].file_path)
        cleaner = Cleaner(memory_gateway)
        cleaner.cleanup(session)

        memory_gateway.fail_deletes.clear()
        result = cleaner.cleanup(session)

        assert result.deleted == [chunks[1]]
        assert result.session_reset is True
        assert session.session_id is None

    def test_cleanup_attempts_are_counted(self, memory_gateway, session):
        chunks = write_chunks(memory_gateway, session, 1)
        memory_gateway.fail_deletes.add(chunks[0].file_path)
        cleaner = Cleaner(memory_gateway)

        cleaner.cleanup(session)
        cleaner.cleanup(session)

        assert session.cleanup_attempts == 2

    def test_delete_exception_counts_as_failure(self, session):
        class BrokenGateway:
            def delete_chunk(self, file_path):
                raise OSError("device gone")

        from chunkvault.models.session import ChunkDescriptor
        session.saved_chunks = [ChunkDescriptor(filename="c", file_path="/c", size_bytes=1, chunk_index=0)]

        result = Cleaner(BrokenGateway()).cleanup(session)

        assert len(result.failed) == 1
        assert session.session_id is not None
