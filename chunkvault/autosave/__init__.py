"""Chunked, crash-recoverable auto-save pipeline."""

from .chunk_writer import ChunkWriter
from .combiner import Combiner
from .cleaner import Cleaner
from .timer import AutoSaveTimer
from .session_manager import SessionLifecycleManager
from .recovery import RecoveryCoordinator
from .publisher import AutoSavePublisher, PROGRESS_TOPIC, STATUS_TOPIC, RECOVERY_TOPIC

__all__ = [
    "ChunkWriter",
    "Combiner",
    "Cleaner",
    "AutoSaveTimer",
    "SessionLifecycleManager",
    "RecoveryCoordinator",
    "AutoSavePublisher",
    "PROGRESS_TOPIC",
    "STATUS_TOPIC",
    "RECOVERY_TOPIC",
]
