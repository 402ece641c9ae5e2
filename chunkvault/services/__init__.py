"""Services layer for ChunkVault application logic."""

from .recording_service import RecordingService, RecordingState

__all__ = [
    "RecordingService",
    "RecordingState",
]
