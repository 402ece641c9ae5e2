"""Event models published to the UI over pub/sub."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List


@dataclass
class AutoSaveEvent:
    """Progress update after a chunk was saved."""
    session_id: str
    chunk_count: int
    bytes_saved: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AutoSaveStatusEvent:
    """Status message about auto-save health."""
    message: str
    level: str = "info"  # "info" | "warning"
    session_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class RecoverableSession:
    """A session whose chunks were left behind by an earlier run."""
    session_id: str
    chunk_count: int
    chunk_paths: List[str] = field(default_factory=list)
