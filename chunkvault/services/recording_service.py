"""Recording service that drives capture state and the auto-save pipeline."""

import logging
from dataclasses import asdict
from enum import Enum
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..audio.capture import AudioCapture
from ..autosave.publisher import AutoSavePublisher
from ..autosave.recovery import RecoveryCoordinator
from ..autosave.session_manager import SessionLifecycleManager
from ..config import ChunkVaultConfig
from ..models.events import RecoverableSession
from ..storage.file_gateway import FileSystemGateway

logger = logging.getLogger(__name__)


class RecordingState(Enum):
    """Capture state machine: Idle -> Recording <-> Paused -> Stopped."""
    IDLE = "idle"
    RECORDING = "recording"
    PAUSED = "paused"
    STOPPED = "stopped"


class RecordingService:
    """Core service that manages capture, auto-save and recovery."""

    def __init__(self,
                 config: ChunkVaultConfig,
                 gateway: Optional[FileSystemGateway] = None,
                 publisher: Optional[AutoSavePublisher] = None,
                 capture_factory: Optional[Callable[[Callable[[bytes], None]], Any]] = None):
        """Initialize recording service.

        Args:
            config: Application configuration
            gateway: Storage gateway (built from config if None)
            publisher: Publisher for UI notifications (a default one if None)
            capture_factory: Builds a capture source from a data callback
        """
        self.config = config
        self.gateway = gateway or FileSystemGateway(
            data_dir=config.get_data_directory(),
            temp_dir=config.get_temp_directory(),
        )
        self.publisher = publisher or AutoSavePublisher()
        self.capture_factory = capture_factory or self._default_capture

        self.sample_rate = config.get('audio.sample_rate', 16000)
        self.channels = config.get('audio.channels', 1)

        self.session_manager = SessionLifecycleManager(
            gateway=self.gateway,
            publisher=self.publisher,
            **config.get_autosave_settings(),
        )
        self.recovery = RecoveryCoordinator(self.gateway, publisher=self.publisher)

        self.state = RecordingState.IDLE
        self.audio_capture = None
        self.started_at: Optional[datetime] = None
        self.last_recording: Optional[bytes] = None
        self.last_recording_path: Optional[str] = None

        logger.info("RecordingService ready")

    def _default_capture(self, callback: Callable[[bytes], None]) -> AudioCapture:
        return AudioCapture(
            callback=callback,
            sample_rate=self.sample_rate,
            chunk_size=self.config.get('audio.chunk_size', 1024),
            channels=self.channels,
        )

    def _on_audio(self, audio_data: bytes) -> None:
        if self.state == RecordingState.RECORDING:
            self.session_manager.append_audio(audio_data)

    def check_for_orphans(self) -> List[RecoverableSession]:
        """Look for recordings left behind by an earlier run."""
        active = [self.session_manager.session.session_id] if self.session_manager.is_active else []
        return self.recovery.scan(exclude_session_ids=[s for s in active if s])

    def start_recording(self) -> Dict[str, Any]:
        """Start capture and a new auto-save session.

        Returns:
            Result dictionary with success status and details
        """
        if self.state in (RecordingState.RECORDING, RecordingState.PAUSED):
            return {
                "success": False,
                "error": "Already recording",
                "session_id": self.session_manager.session.session_id
            }

        autosave = self.session_manager.start_session()
        try:
            self.audio_capture = self.capture_factory(self._on_audio)
            self.state = RecordingState.RECORDING
            self.audio_capture.start_recording()
        except Exception as e:
            logger.error(f"Error starting recording: {e}")
            self.state = RecordingState.IDLE
            self.session_manager.stop_session()
            return {
                "success": False,
                "error": str(e)
            }

        self.session_manager.start_timer()
        self.started_at = datetime.now()
        self.last_recording = None
        self.last_recording_path = None

        status = "Recording... (Auto-save enabled)" if autosave else "Recording... (Auto-save off)"
        self.publisher.publish_status(status, session_id=self.session_manager.session.session_id)
        logger.info(f"Started recording, auto-save {'on' if autosave else 'off'}")

        return {
            "success": True,
            "session_id": self.session_manager.session.session_id,
            "autosave_enabled": autosave,
            "started_at": self.started_at.isoformat()
        }

    def pause_recording(self) -> bool:
        if self.state != RecordingState.RECORDING:
            return False

        self.audio_capture.stop_recording()
        self.session_manager.pause()
        self.state = RecordingState.PAUSED
        logger.info("Recording paused")
        return True

    def resume_recording(self) -> bool:
        if self.state != RecordingState.PAUSED:
            return False

        self.state = RecordingState.RECORDING
        self.audio_capture.start_recording()
        self.session_manager.resume()
        logger.info("Recording resumed")
        return True

    def stop_recording(self) -> Dict[str, Any]:
        """Stop capture, combine the recording and save it.

        Returns:
            Result dictionary with the saved recording and auto-save outcome
        """
        if self.state not in (RecordingState.RECORDING, RecordingState.PAUSED):
            return {
                "success": False,
                "error": "Not recording"
            }

        if self.audio_capture and self.audio_capture.is_recording:
            self.audio_capture.stop_recording()
        self.state = RecordingState.STOPPED

        session_id = self.session_manager.session.session_id
        result = self.session_manager.stop_session(
            persist=lambda audio: self._save_recording(audio, session_id))
        self.last_recording = result.audio_data

        combine = result.combine
        cleanup = result.cleanup
        return {
            "success": self.last_recording_path is not None,
            "session_id": session_id,
            "stopped_at": datetime.now().isoformat(),
            "recording_path": self.last_recording_path,
            "size_bytes": result.size_bytes,
            "chunks_combined": len(combine.loaded_indices) if combine else 0,
            "chunks_skipped": len(combine.skipped_indices) if combine else 0,
            "used_fallback": combine.used_fallback if combine else False,
            "chunks_retained": len(cleanup.failed) if cleanup else len(combine.loaded_indices) + len(combine.skipped_indices),
        }

    def _save_recording(self, audio_data: bytes, session_id: Optional[str]) -> str:
        self.last_recording_path = self.gateway.save_recording(
            audio_data, session_id=session_id,
            sample_rate=self.sample_rate, channels=self.channels)
        return self.last_recording_path

    def clear(self) -> None:
        """Return to Idle, discarding the last recording from memory."""
        if self.state in (RecordingState.RECORDING, RecordingState.PAUSED):
            raise RuntimeError("Stop recording before clearing")
        self.state = RecordingState.IDLE
        self.last_recording = None
        self.last_recording_path = None

    def retry_cleanup(self) -> Dict[str, Any]:
        result = self.session_manager.retry_cleanup()
        return {
            "success": result.success,
            "deleted": len(result.deleted),
            "failed": len(result.failed),
        }

    def recover_session(self, session_id: str, output_filename: Optional[str] = None) -> Dict[str, Any]:
        """Rebuild an orphaned recording and save it.

        Chunks are not deleted; call ``delete_session_chunks`` once the
        user is happy with the recovered file.
        """
        result = self.recovery.recover(session_id)
        if not result.success:
            self.publisher.publish_status(f"Failed to recover recording {session_id}", "warning", session_id)
            return {
                "success": False,
                "session_id": session_id,
                "error": result.error,
            }

        path = self.gateway.save_recording(
            result.audio_data, session_id=session_id, filename=output_filename,
            sample_rate=self.sample_rate, channels=self.channels)
        self.publisher.publish_status(f"Recovered recording from {result.chunks_loaded} chunks",
                                      session_id=session_id)
        return {
            "success": True,
            "session_id": session_id,
            "recording_path": path,
            "size_bytes": len(result.audio_data),
            "chunks_loaded": result.chunks_loaded,
            "chunks_failed": len(result.failed_paths),
        }

    def delete_session_chunks(self, session_id: str) -> Dict[str, Any]:
        report = self.recovery.delete_session_chunks(session_id)
        if report.deleted_paths:
            self.publisher.publish_status(f"Deleted chunks for session {session_id}", session_id=session_id)
        return {
            "success": report.success,
            "deleted": len(report.deleted_paths),
            "failed": len(report.failed_paths),
        }

    def delete_all_orphans(self) -> Dict[str, Any]:
        active = [self.session_manager.session.session_id] if self.session_manager.is_active else []
        report = self.recovery.delete_all_orphans(exclude_session_ids=[s for s in active if s])
        self.publisher.publish_status("All orphaned recording chunks deleted" if report.success
                                      else "Some orphaned recording chunks could not be deleted",
                                      "info" if report.success else "warning")
        return {
            "success": report.success,
            "deleted": len(report.deleted_paths),
            "failed": len(report.failed_paths),
        }

    def get_status(self) -> Dict[str, Any]:
        """Current state plus storage usage and, once capture started, audio statistics."""
        session = self.session_manager.session
        status = {
            "state": self.state.value,
            "session_id": session.session_id,
            "autosave_enabled": session.autosave_enabled,
            "chunks_saved": len(session.saved_chunks),
            "buffered_bytes": self.session_manager.writer.buffered_bytes,
            "storage": self.gateway.get_storage_stats(),
        }
        if self.audio_capture is not None:
            status["audio"] = asdict(self.audio_capture.get_recording_stats())
        return status

    def cleanup(self) -> None:
        """Stop any active recording before shutdown."""
        if self.state in (RecordingState.RECORDING, RecordingState.PAUSED):
            self.stop_recording()
        logger.info("RecordingService cleaned up")
