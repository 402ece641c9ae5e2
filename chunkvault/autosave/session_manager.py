"""Session lifecycle manager for chunked, crash-recoverable auto-save."""

import logging
import threading
from typing import Any, Callable, Optional

from ..models.results import CleanupResult, StopResult
from ..models.session import RecordingSession
from ..storage.gateway import AbstractStorageGateway
from ..storage.naming import DEFAULT_EXTENSION, generate_session_id
from .chunk_writer import ChunkWriter
from .cleaner import Cleaner
from .combiner import Combiner
from .publisher import AutoSavePublisher
from .timer import AutoSaveTimer

logger = logging.getLogger(__name__)


class SessionLifecycleManager:
    """Owns one capture's auto-save session from start to cleanup."""

    def __init__(self,
                 gateway: AbstractStorageGateway,
                 session: Optional[RecordingSession] = None,
                 interval_seconds: float = 60.0,
                 autosave_enabled: bool = True,
                 extension: str = DEFAULT_EXTENSION,
                 publisher: Optional[AutoSavePublisher] = None,
                 max_consecutive_write_failures: int = 5,
                 max_cleanup_attempts: int = 3):
        self.gateway = gateway
        self.session = session if session is not None else RecordingSession()
        self.autosave_requested = autosave_enabled
        self.publisher = publisher
        self.max_cleanup_attempts = max_cleanup_attempts

        self.writer = ChunkWriter(
            gateway=gateway,
            session=self.session,
            extension=extension,
            publisher=publisher,
            max_consecutive_failures=max_consecutive_write_failures,
        )
        self.combiner = Combiner(gateway)
        self.cleaner = Cleaner(gateway)
        self.timer = AutoSaveTimer(interval_seconds, self.writer.flush)

        self.is_active = False
        self._lifecycle_lock = threading.Lock()

    @property
    def autosave_enabled(self) -> bool:
        return self.session.autosave_enabled

    def start_session(self) -> bool:
        """Begin a new auto-save session.

        If the gateway cannot provide a temp directory, auto-save is turned
        off for this capture and recording carries on in memory only.

        Returns:
            True if chunks will be persisted for this session
        """
        with self._lifecycle_lock:
            if self.is_active:
                raise RuntimeError(f"Session already active: {self.session.session_id}")

            if self.session.saved_chunks:
                self._release_retained_chunks()

            self.session.reset()
            self.writer.drain_buffer()
            self.writer.consecutive_failures = 0
            self.is_active = True

            if not self.autosave_requested:
                self.session.autosave_enabled = False
                logger.info("Auto-save disabled by configuration")
                return False

            try:
                temp_directory = self.gateway.get_temp_directory()
            except Exception as e:
                logger.warning(f"Failed to initialize auto-save session, recording in memory only: {e}")
                self.session.autosave_enabled = False
                self._publish_status("Auto-save unavailable; recording is kept in memory only", "warning")
                return False

            self.session.session_id = generate_session_id()
            self.session.temp_directory = temp_directory
            self.session.autosave_enabled = True

            logger.info(f"Auto-save session initialized: {self.session.session_id} in {temp_directory}")
            return True

    def _release_retained_chunks(self) -> None:
        """Retry deleting chunks a previous stop could not remove.

        Anything that still fails stays on disk and is found by the orphan
        scan on the next start.
        """
        previous_id = self.session.session_id
        result = self.cleaner.cleanup(self.session)
        if result.success:
            logger.info(f"Removed retained chunks of previous session {previous_id}")
            return

        paths = [c.file_path for c in result.failed]
        logger.warning(f"Leaving {len(paths)} undeletable chunks of session {previous_id} "
                       f"for orphan recovery: {paths}")
        self._publish_status(
            f"{len(paths)} auto-save files from the previous recording could not be removed",
            "warning", previous_id)

    def append_audio(self, audio_data: bytes) -> None:
        """Feed captured bytes into the chunk writer's buffer."""
        self.writer.append(audio_data)

    def start_timer(self) -> None:
        if self.is_active and self.session.autosave_enabled:
            self.timer.start()

    def pause(self) -> None:
        """Suspend periodic flushing without flushing."""
        self.timer.stop()

    def resume(self) -> None:
        self.start_timer()

    def flush(self):
        """Flush immediately, serialized with timer ticks."""
        return self.writer.flush()

    def stop_session(self, persist: Optional[Callable[[bytes], Any]] = None) -> StopResult:
        """Stop the session: final flush, combine, then clean up.

        Args:
            persist: Optional callable that stores the combined recording.
                If it raises, cleanup is skipped so the chunks remain on
                disk for recovery.
        """
        with self._lifecycle_lock:
            try:
                return self._stop_locked(persist)
            finally:
                self.is_active = False

    def _stop_locked(self, persist: Optional[Callable[[bytes], Any]]) -> StopResult:
        # Joining the timer waits for an in-flight flush
        self.timer.stop()

        session_id = self.session.session_id
        final_flush = self.writer.flush()
        trailing = self.writer.drain_buffer()

        combine = self.combiner.combine(list(self.session.saved_chunks), trailing)
        result = StopResult(session_id=session_id, audio_data=combine.audio_data,
                            final_flush=final_flush, combine=combine)

        if persist is not None:
            try:
                persist(combine.audio_data)
            except Exception as e:
                logger.error(f"Failed to store combined recording, keeping chunks for recovery: {e}")
                self._publish_status("Recording could not be saved; auto-save files were kept",
                                     "warning", session_id)
                # Hand the chunks over to orphan recovery instead of a later cleanup
                self.session.reset()
                return result

        result.cleanup = self.cleaner.cleanup(self.session)
        self._check_cleanup(result.cleanup, session_id)

        logger.info(f"Session stopped: {session_id} ({result.size_bytes} bytes)")
        return result

    def retry_cleanup(self) -> CleanupResult:
        """Try again to delete chunks left behind by a failed cleanup."""
        with self._lifecycle_lock:
            if self.is_active:
                raise RuntimeError("Cannot clean up while a session is recording")

            session_id = self.session.session_id
            result = self.cleaner.cleanup(self.session)
            self._check_cleanup(result, session_id)
            return result

    def _check_cleanup(self, result: CleanupResult, session_id: Optional[str]) -> None:
        if result.failed and self.session.cleanup_attempts >= self.max_cleanup_attempts:
            self._publish_status(
                f"{len(result.failed)} auto-save files could not be deleted after "
                f"{self.session.cleanup_attempts} attempts",
                "warning", session_id)

    def _publish_status(self, message: str, level: str, session_id: Optional[str] = None) -> None:
        if self.publisher:
            self.publisher.publish_status(message, level=level, session_id=session_id or "")
