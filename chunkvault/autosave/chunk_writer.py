"""Chunk writer that periodically persists the in-memory capture buffer."""

import logging
import threading
from typing import Optional

from ..models.events import AutoSaveEvent
from ..models.results import FlushResult, WriteResult
from ..models.session import ChunkDescriptor, RecordingSession
from ..storage.gateway import AbstractStorageGateway
from ..storage.naming import DEFAULT_EXTENSION, chunk_filename
from .publisher import AutoSavePublisher

logger = logging.getLogger(__name__)


class ChunkWriter:
    """Owns the capture buffer and writes it out as ordered chunks.

    Flushes are serialized with a per-writer lock, so a timer tick and the
    forced flush on stop can never write or clear the same bytes twice.
    The capture thread may keep appending while a flush is in progress;
    only the bytes that were actually written are removed from the buffer.
    """

    def __init__(self,
                 gateway: AbstractStorageGateway,
                 session: RecordingSession,
                 extension: str = DEFAULT_EXTENSION,
                 publisher: Optional[AutoSavePublisher] = None,
                 max_consecutive_failures: int = 5):
        self.gateway = gateway
        self.session = session
        self.extension = extension
        self.publisher = publisher
        self.max_consecutive_failures = max_consecutive_failures

        self.buffer = bytearray()
        self._buffer_lock = threading.Lock()
        self._flush_lock = threading.Lock()

        self.consecutive_failures = 0
        self.total_failures = 0

    @property
    def buffered_bytes(self) -> int:
        with self._buffer_lock:
            return len(self.buffer)

    def append(self, audio_data: bytes) -> None:
        """Add captured audio to the buffer."""
        if not audio_data:
            return
        with self._buffer_lock:
            self.buffer.extend(audio_data)

    def flush(self) -> FlushResult:
        """Write the current buffer as the next chunk."""
        with self._flush_lock:
            return self._flush_locked()

    def _flush_locked(self) -> FlushResult:
        session = self.session
        if not session.autosave_enabled or session.session_id is None:
            return FlushResult(flushed=False, skipped=True)

        with self._buffer_lock:
            pending = bytes(self.buffer)

        if not pending:
            logger.debug("Flush skipped: buffer is empty")
            return FlushResult(flushed=False, skipped=True)

        filename = chunk_filename(session.session_id, session.chunk_index, self.extension)
        try:
            result = self.gateway.write_chunk(pending, filename)
        except Exception as e:
            result = WriteResult(success=False, error=str(e))

        if not result.success:
            return self._record_failure(filename, result.error or "write reported failure")

        descriptor = ChunkDescriptor(
            filename=filename,
            file_path=result.file_path,
            size_bytes=result.size_bytes or len(pending),
            chunk_index=session.chunk_index,
        )
        session.record_chunk(descriptor)

        # Bytes appended during the write stay in the buffer for the next chunk
        with self._buffer_lock:
            del self.buffer[:len(pending)]

        self.consecutive_failures = 0
        logger.info(f"Auto-saved chunk {filename} ({len(pending)} bytes)")

        if self.publisher:
            self.publisher.publish_progress(AutoSaveEvent(
                session_id=session.session_id,
                chunk_count=len(session.saved_chunks),
                bytes_saved=sum(c.size_bytes for c in session.saved_chunks),
            ))

        return FlushResult(flushed=True, chunk=descriptor)

    def _record_failure(self, filename: str, error: str) -> FlushResult:
        self.consecutive_failures += 1
        self.total_failures += 1
        logger.error(f"Failed to save chunk {filename}: {error} "
                     f"({self.consecutive_failures} consecutive failures)")

        if self.consecutive_failures == self.max_consecutive_failures and self.publisher:
            self.publisher.publish_status(
                f"Auto-save is failing: {self.consecutive_failures} chunks in a row could not be saved",
                level="warning",
                session_id=self.session.session_id,
            )

        return FlushResult(flushed=False, error=error,
                           consecutive_failures=self.consecutive_failures)

    def drain_buffer(self) -> bytes:
        """Remove and return everything still buffered.

        Waits for any in-flight flush so the returned bytes are exactly the
        ones that were never written to a chunk.
        """
        with self._flush_lock:
            with self._buffer_lock:
                trailing = bytes(self.buffer)
                self.buffer.clear()
        return trailing
