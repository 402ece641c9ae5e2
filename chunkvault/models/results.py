"""Result types returned by the auto-save pipeline.

Every operation reports what happened instead of swallowing failures in
log output, so callers can tell a degraded outcome from a clean one.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .session import ChunkDescriptor


@dataclass
class WriteResult:
    """Outcome of a single gateway write."""
    success: bool
    file_path: Optional[str] = None
    size_bytes: int = 0
    error: Optional[str] = None


@dataclass
class DeleteResult:
    """Outcome of a single gateway delete."""
    success: bool
    error: Optional[str] = None


@dataclass
class FlushResult:
    """Outcome of one flush of the capture buffer."""
    flushed: bool
    chunk: Optional[ChunkDescriptor] = None
    skipped: bool = False  # buffer empty or auto-save disabled
    error: Optional[str] = None
    consecutive_failures: int = 0


@dataclass
class CombineResult:
    """Outcome of combining saved chunks with the trailing buffer."""
    audio_data: bytes
    loaded_indices: List[int] = field(default_factory=list)
    skipped_indices: List[int] = field(default_factory=list)
    used_fallback: bool = False
    error: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.audio_data)

    @property
    def complete(self) -> bool:
        """True if every chunk was loaded and no fallback was needed."""
        return not self.skipped_indices and not self.used_fallback


@dataclass
class CleanupResult:
    """Outcome of deleting a session's chunks."""
    deleted: List[ChunkDescriptor] = field(default_factory=list)
    failed: List[ChunkDescriptor] = field(default_factory=list)
    session_reset: bool = False

    @property
    def success(self) -> bool:
        return not self.failed


@dataclass
class StopResult:
    """Outcome of stopping an auto-save session."""
    session_id: Optional[str]
    audio_data: bytes
    final_flush: Optional[FlushResult] = None
    combine: Optional[CombineResult] = None
    cleanup: Optional[CleanupResult] = None

    @property
    def size_bytes(self) -> int:
        return len(self.audio_data)


@dataclass
class RecoveryResult:
    """Outcome of rebuilding a recording from orphaned chunks."""
    session_id: str
    success: bool
    audio_data: bytes = b""
    chunks_found: int = 0
    chunks_loaded: int = 0
    failed_paths: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class DeletionReport:
    """Outcome of deleting orphaned chunks by path."""
    deleted_paths: List[str] = field(default_factory=list)
    failed_paths: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_paths
