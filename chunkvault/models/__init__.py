"""Data models for the ChunkVault application."""

from .audio import AudioStats
from .session import ChunkDescriptor, RecordingSession
from .events import AutoSaveEvent, AutoSaveStatusEvent, RecoverableSession
from .results import (
    WriteResult,
    DeleteResult,
    FlushResult,
    CombineResult,
    CleanupResult,
    StopResult,
    RecoveryResult,
    DeletionReport,
)

__all__ = [
    "AudioStats",
    "ChunkDescriptor",
    "RecordingSession",
    "AutoSaveEvent",
    "AutoSaveStatusEvent",
    "RecoverableSession",
    # Pipeline results
    "WriteResult",
    "DeleteResult",
    "FlushResult",
    "CombineResult",
    "CleanupResult",
    "StopResult",
    "RecoveryResult",
    "DeletionReport",
]
