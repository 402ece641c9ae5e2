"""Filesystem storage gateway for recording chunks and finished recordings."""

import os
import wave
import logging
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..models.results import WriteResult, DeleteResult
from .gateway import AbstractStorageGateway, StorageError


logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".part"


class FileSystemGateway(AbstractStorageGateway):
    """Stores chunks in a temp directory and finished recordings in a data directory."""

    def __init__(self, data_dir: str = "./data", temp_dir: Optional[str] = None):
        """Initialize gateway with data and temp directories.

        Args:
            data_dir: Base directory for finished recordings
            temp_dir: Directory for in-progress chunks (defaults to data_dir/tmp/recordings)
        """
        self.data_dir = Path(data_dir)
        self.recordings_dir = self.data_dir / "recordings"
        self.temp_dir = Path(temp_dir) if temp_dir else self.data_dir / "tmp" / "recordings"

        logger.info(f"FileSystemGateway initialized with data_dir: {self.data_dir}, temp_dir: {self.temp_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.recordings_dir, self.temp_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def get_temp_directory(self) -> str:
        try:
            self._ensure_directories()
        except OSError as e:
            raise StorageError(f"Temp directory unavailable: {e}") from e

        if not os.access(self.temp_dir, os.W_OK):
            raise StorageError(f"Temp directory is not writable: {self.temp_dir}")
        return str(self.temp_dir)

    def write_chunk(self, data: bytes, filename: str) -> WriteResult:
        """Write a chunk atomically.

        The bytes go to a ``.part`` file first and are renamed into place
        after fsync, so a crash never leaves a truncated chunk under a
        valid chunk name.
        """
        if os.path.basename(filename) != filename:
            raise StorageError(f"Chunk filename must not contain a directory: {filename}")

        final_path = self.temp_dir / filename
        partial_path = self.temp_dir / (filename + PARTIAL_SUFFIX)

        try:
            self.temp_dir.mkdir(parents=True, exist_ok=True)
            with open(partial_path, 'wb') as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(partial_path, final_path)
        except OSError as e:
            logger.error(f"Error writing chunk {filename}: {e}")
            try:
                partial_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as cleanup_error:
                logger.warning(f"Could not remove partial chunk {partial_path}: {cleanup_error}")
            raise StorageError(f"Failed to write chunk {filename}: {e}") from e

        logger.debug(f"Chunk saved: {final_path} ({len(data)} bytes)")
        return WriteResult(success=True, file_path=str(final_path), size_bytes=len(data))

    def read_chunk(self, file_path: str) -> bytes:
        try:
            with open(file_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read chunk {file_path}: {e}") from e

    def delete_chunk(self, file_path: str) -> DeleteResult:
        try:
            os.remove(file_path)
        except FileNotFoundError:
            # Already gone counts as deleted
            logger.debug(f"Chunk already deleted: {file_path}")
        except OSError as e:
            logger.error(f"Error deleting chunk {file_path}: {e}")
            return DeleteResult(success=False, error=str(e))

        logger.debug(f"Chunk deleted: {file_path}")
        return DeleteResult(success=True)

    def list_chunks(self, prefix: str) -> List[str]:
        if not self.temp_dir.exists():
            return []

        try:
            paths = [
                str(path) for path in self.temp_dir.iterdir()
                if path.is_file()
                and path.name.startswith(prefix)
                and not path.name.endswith(PARTIAL_SUFFIX)
            ]
        except OSError as e:
            raise StorageError(f"Failed to list chunks in {self.temp_dir}: {e}") from e

        paths.sort()
        logger.debug(f"Found {len(paths)} chunks with prefix '{prefix}'")
        return paths

    def save_recording(self, audio_data: bytes, session_id: Optional[str] = None,
                       sample_rate: int = 16000, channels: int = 1,
                       sample_width: int = 2, filename: Optional[str] = None) -> str:
        """Save a finished recording as a WAV file and return its path.

        Args:
            audio_data: Raw PCM bytes
            session_id: Session the recording came from, used in the filename
            sample_rate: Audio sample rate
            channels: Number of audio channels
            sample_width: Bytes per sample
            filename: Optional custom filename
        """
        if filename is None:
            stem = session_id or datetime.now().strftime("recording_%Y%m%d_%H%M%S")
            filename = f"{stem}.wav"

        if not filename.endswith('.wav'):
            filename += '.wav'

        self.recordings_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.recordings_dir / filename

        try:
            with wave.open(str(output_path), 'wb') as wf:
                wf.setnchannels(channels)
                wf.setsampwidth(sample_width)
                wf.setframerate(sample_rate)
                wf.writeframes(audio_data)

            logger.info(f"Recording saved: {output_path} ({len(audio_data)} bytes)")
            return str(output_path)

        except Exception as e:
            logger.error(f"Error saving recording: {e}")
            raise

    def remove_partial_files(self) -> int:
        """Remove ``.part`` files left by writes interrupted by a crash.

        Returns:
            Number of files removed
        """
        if not self.temp_dir.exists():
            return 0

        removed = 0
        for path in self.temp_dir.glob(f"*{PARTIAL_SUFFIX}"):
            try:
                path.unlink()
                removed += 1
                logger.info(f"Removed partial chunk: {path}")
            except OSError as e:
                logger.warning(f"Could not remove partial chunk {path}: {e}")
        return removed

    def get_storage_stats(self) -> Dict[str, Any]:
        """Get storage usage statistics for pending chunks and recordings."""
        try:
            chunk_bytes = 0
            chunk_files = 0
            if self.temp_dir.exists():
                for path in self.temp_dir.iterdir():
                    if path.is_file():
                        chunk_files += 1
                        chunk_bytes += path.stat().st_size

            recording_files = 0
            if self.recordings_dir.exists():
                recording_files = sum(1 for p in self.recordings_dir.glob("*.wav"))

            return {
                "chunk_files": chunk_files,
                "chunk_bytes": chunk_bytes,
                "chunk_mb": round(chunk_bytes / (1024 * 1024), 2),
                "recording_files": recording_files,
                "data_directory": str(self.data_dir),
                "temp_directory": str(self.temp_dir),
            }

        except Exception as e:
            logger.error(f"Error getting storage stats: {e}")
            return {}
