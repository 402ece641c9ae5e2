"""Chunk storage and naming."""

from .gateway import AbstractStorageGateway, StorageError
from .file_gateway import FileSystemGateway
from .naming import (
    CHUNK_PREFIX,
    chunk_filename,
    generate_session_id,
    parse_chunk_filename,
)

__all__ = [
    "AbstractStorageGateway",
    "StorageError",
    "FileSystemGateway",
    "CHUNK_PREFIX",
    "chunk_filename",
    "generate_session_id",
    "parse_chunk_filename",
]
