"""Pytest configuration and fixtures for ChunkVault tests."""

import pytest
import tempfile
import logging
from pathlib import Path
from typing import Dict, List, Set

import numpy as np
from pubsub import pub

from chunkvault.models.results import WriteResult, DeleteResult
from chunkvault.models.session import RecordingSession
from chunkvault.storage.gateway import AbstractStorageGateway, StorageError


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without real devices")
    config.addinivalue_line("markers", "integration: tests that touch the filesystem")


class InMemoryGateway(AbstractStorageGateway):
    """Storage gateway backed by a dict, with switches for injecting failures."""

    def __init__(self, temp_dir: str = "/mem/recordings"):
        self.temp_dir = temp_dir
        self.files: Dict[str, bytes] = {}
        self.unavailable = False
        self.fail_writes = 0          # number of upcoming writes to fail
        self.fail_reads: Set[str] = set()
        self.fail_deletes: Set[str] = set()
        self.write_calls: List[str] = []
        self.delete_calls: List[str] = []

    def path_for(self, filename: str) -> str:
        return f"{self.temp_dir}/{filename}"

    def get_temp_directory(self) -> str:
        if self.unavailable:
            raise StorageError("temp directory unavailable")
        return self.temp_dir

    def write_chunk(self, data: bytes, filename: str) -> WriteResult:
        self.write_calls.append(filename)
        if self.unavailable:
            raise StorageError("storage unavailable")
        if self.fail_writes > 0:
            self.fail_writes -= 1
            return WriteResult(success=False, error="disk full")
        path = self.path_for(filename)
        self.files[path] = bytes(data)
        return WriteResult(success=True, file_path=path, size_bytes=len(data))

    def read_chunk(self, file_path: str) -> bytes:
        if file_path in self.fail_reads or file_path not in self.files:
            raise StorageError(f"cannot read {file_path}")
        return self.files[file_path]

    def delete_chunk(self, file_path: str) -> DeleteResult:
        self.delete_calls.append(file_path)
        if file_path in self.fail_deletes:
            return DeleteResult(success=False, error="permission denied")
        self.files.pop(file_path, None)
        return DeleteResult(success=True)

    def list_chunks(self, prefix: str) -> List[str]:
        if self.unavailable:
            raise StorageError("storage unavailable")
        return sorted(p for p in self.files if p.rsplit("/", 1)[-1].startswith(prefix))


class EventRecorder:
    """Collects pub/sub messages; kept alive by the fixture since pubsub holds weak refs."""

    def __init__(self):
        self.progress = []
        self.status = []
        self.recoverable = []

    def on_progress(self, event):
        self.progress.append(event)

    def on_status(self, event):
        self.status.append(event)

    def on_sessions(self, sessions):
        self.recoverable.append(sessions)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def memory_gateway():
    return InMemoryGateway()


@pytest.fixture
def session():
    return RecordingSession(session_id="recording_20240101_120000_abcd1234", autosave_enabled=True)


@pytest.fixture
def events():
    """Record auto-save notifications for the duration of a test."""
    from chunkvault.autosave.publisher import PROGRESS_TOPIC, STATUS_TOPIC, RECOVERY_TOPIC

    recorder = EventRecorder()
    pub.subscribe(recorder.on_progress, PROGRESS_TOPIC)
    pub.subscribe(recorder.on_status, STATUS_TOPIC)
    pub.subscribe(recorder.on_sessions, RECOVERY_TOPIC)
    yield recorder
    pub.unsubscribe(recorder.on_progress, PROGRESS_TOPIC)
    pub.unsubscribe(recorder.on_status, STATUS_TOPIC)
    pub.unsubscribe(recorder.on_sessions, RECOVERY_TOPIC)


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def config_file(temp_data_dir):
    """Write a config file pointing storage into the temp directory."""
    path = Path(temp_data_dir) / "chunkvault.yaml"
    path.write_text(
        "autosave:\n"
        "  enabled: true\n"
        "  interval_seconds: 0.05\n"
        "storage:\n"
        "  data_directory: data\n"
        "audio:\n"
        "  sample_rate: 16000\n"
        "  channels: 1\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  file_path: logs/test.log\n"
    )
    return str(path)


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    from unittest.mock import Mock, patch

    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }
