"""Integration tests for auto-save, crash recovery and cleanup on a real filesystem."""

import os
import pytest

from chunkvault.autosave.recovery import RecoveryCoordinator
from chunkvault.autosave.session_manager import SessionLifecycleManager
from chunkvault.storage.file_gateway import FileSystemGateway


@pytest.mark.integration
class TestAutoSavePipeline:

    def test_two_chunks_and_trailing_buffer(self, temp_data_dir):
        """1024 + 2048 byte chunks and a 500 byte tail combine to 3572 bytes, then clean up."""
        gateway = FileSystemGateway(temp_data_dir)
        manager = SessionLifecycleManager(gateway, interval_seconds=60)
        manager.start_session()

        manager.append_audio(b"\x01" * 1024)
        first = manager.flush().chunk
        manager.append_audio(b"\x02" * 2048)
        second = manager.flush().chunk
        assert first.filename.endswith("_chunk_000.pcm")
        assert second.filename.endswith("_chunk_001.pcm")
        assert os.path.getsize(first.file_path) == 1024
        assert os.path.getsize(second.file_path) == 2048

        manager.append_audio(b"\x03" * 500)
        result = manager.stop_session()

        assert result.size_bytes == 3572
        assert result.audio_data == b"\x01" * 1024 + b"\x02" * 2048 + b"\x03" * 500
        assert result.cleanup.session_reset is True
        assert gateway.list_chunks("recording_") == []
        assert manager.session.session_id is None
        assert manager.session.chunk_index == 0
        assert manager.session.saved_chunks == []

    def test_crashed_session_is_recovered_by_next_run(self, temp_data_dir, sample_audio_chunk):
        # First run: records three chunks, then the process dies before stop
        first_run = SessionLifecycleManager(FileSystemGateway(temp_data_dir), interval_seconds=60)
        first_run.start_session()
        crashed_id = first_run.session.session_id
        for _ in range(3):
            first_run.append_audio(sample_audio_chunk)
            first_run.flush()
        first_run.append_audio(b"lost in the crash")

        # Another abandoned session with a single chunk
        other = SessionLifecycleManager(FileSystemGateway(temp_data_dir), interval_seconds=60)
        other.start_session()
        other.append_audio(b"\x05" * 64)
        other.flush()

        # Second run
        gateway = FileSystemGateway(temp_data_dir)
        coordinator = RecoveryCoordinator(gateway)
        sessions = coordinator.scan()

        assert [(s.session_id, s.chunk_count) for s in sessions] == [
            (crashed_id, 3), (other.session.session_id, 1)]

        recovered = coordinator.recover(crashed_id)
        assert recovered.success is True
        assert recovered.audio_data == sample_audio_chunk * 3
        assert len(coordinator.find_chunks(crashed_id)) == 3

        path = gateway.save_recording(recovered.audio_data, session_id=crashed_id)
        assert os.path.exists(path)

        report = coordinator.delete_all_orphans()
        assert report.success is True
        assert len(report.deleted_paths) == 4
        assert coordinator.scan() == []

    def test_partial_write_from_crash_is_not_an_orphan(self, temp_data_dir):
        gateway = FileSystemGateway(temp_data_dir)
        temp_dir = gateway.get_temp_directory()
        with open(os.path.join(temp_dir, "recording_20240101_120000_abcd1234_chunk_000.pcm.part"), "wb") as f:
            f.write(b"half")

        assert RecoveryCoordinator(gateway).scan() == []
        assert gateway.remove_partial_files() == 1
