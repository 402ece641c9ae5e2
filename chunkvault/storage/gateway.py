"""Abstract base class for durable chunk storage."""

from abc import ABC, abstractmethod
from typing import List

from ..models.results import WriteResult, DeleteResult


class StorageError(Exception):
    """Raised when the storage gateway cannot complete an operation."""


class AbstractStorageGateway(ABC):
    """Write/read/delete/list operations over a temporary chunk directory.

    Implementations may either raise ``StorageError`` or return an
    unsuccessful result; callers treat both as a failure.
    """

    @abstractmethod
    def get_temp_directory(self) -> str:
        """Return a writable directory for chunk files.

        Raises:
            StorageError: If no writable location is available
        """
        pass

    @abstractmethod
    def write_chunk(self, data: bytes, filename: str) -> WriteResult:
        """Persist bytes under the given filename.

        Args:
            data: Chunk bytes
            filename: Chunk filename (no directory component)

        Returns:
            WriteResult with the stored path and size
        """
        pass

    @abstractmethod
    def read_chunk(self, file_path: str) -> bytes:
        """Load a chunk's bytes.

        Raises:
            StorageError: If the chunk cannot be read
        """
        pass

    @abstractmethod
    def delete_chunk(self, file_path: str) -> DeleteResult:
        """Delete a chunk file."""
        pass

    @abstractmethod
    def list_chunks(self, prefix: str) -> List[str]:
        """List chunk paths whose filename starts with ``prefix``, sorted by name."""
        pass
