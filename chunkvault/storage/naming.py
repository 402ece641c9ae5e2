"""Chunk file naming convention.

Chunk files are named ``{session_id}_chunk_{index:03d}.{ext}``. Session ids
start with ``recording_`` followed by a timestamp and a random suffix, so
listings of the temp directory sort chronologically and the session id can
be recovered from a bare filename.
"""

import os
import random
import re
import string
from datetime import datetime
from typing import Optional, Tuple

CHUNK_PREFIX = "recording_"
DEFAULT_EXTENSION = "pcm"

CHUNK_FILENAME_PATTERN = re.compile(
    r"^(?P<session_id>recording_\d{8}_\d{6}_[a-z0-9]+)_chunk_(?P<index>\d{3,})\.(?P<ext>[A-Za-z0-9]+)$"
)


def generate_session_id(now: Optional[datetime] = None) -> str:
    """Create a new session id with timestamp and random suffix.

    Returns:
        Session ID such as ``recording_20240101_120000_k3j9x2ab``
    """
    now = now or datetime.now()
    timestamp = now.strftime("%Y%m%d_%H%M%S")
    random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=8))
    return f"{CHUNK_PREFIX}{timestamp}_{random_suffix}"


def chunk_filename(session_id: str, chunk_index: int, extension: str = DEFAULT_EXTENSION) -> str:
    """Build the filename for a chunk."""
    if chunk_index < 0:
        raise ValueError(f"Chunk index must be non-negative, got {chunk_index}")
    return f"{session_id}_chunk_{chunk_index:03d}.{extension.lstrip('.')}"


def parse_chunk_filename(path: str) -> Optional[Tuple[str, int]]:
    """Extract ``(session_id, chunk_index)`` from a chunk path.

    Args:
        path: Chunk filename or full path

    Returns:
        Tuple of session id and index, or None if the name does not match
    """
    match = CHUNK_FILENAME_PATTERN.match(os.path.basename(path))
    if not match:
        return None
    return match.group("session_id"), int(match.group("index"))
