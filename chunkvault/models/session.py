"""Session-related data models for chunked auto-save."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ChunkDescriptor:
    """A chunk of a recording that has been persisted to storage."""
    filename: str
    file_path: str
    size_bytes: int
    chunk_index: int
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class RecordingSession:
    """Identity and bookkeeping for one capture's auto-save activity.

    A session is passed explicitly to the writer, combiner and cleaner so
    that several captures (or tests) never share hidden state.
    """
    session_id: Optional[str] = None
    chunk_index: int = 0
    saved_chunks: List[ChunkDescriptor] = field(default_factory=list)
    autosave_enabled: bool = False
    temp_directory: Optional[str] = None
    cleanup_attempts: int = 0

    def record_chunk(self, descriptor: ChunkDescriptor) -> None:
        """Append a persisted chunk and advance the index."""
        self.saved_chunks.append(descriptor)
        self.chunk_index += 1

    def reset(self) -> None:
        """Drop the session identity. Only valid once every chunk is deleted."""
        self.session_id = None
        self.chunk_index = 0
        self.saved_chunks = []
        self.cleanup_attempts = 0
        self.temp_directory = None
