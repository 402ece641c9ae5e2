"""Deletes a session's chunks once they have been combined."""

import logging

from ..models.results import CleanupResult, DeleteResult
from ..models.session import RecordingSession
from ..storage.gateway import AbstractStorageGateway

logger = logging.getLogger(__name__)


class Cleaner:
    """Deletes saved chunks, keeping any that fail for a later attempt."""

    def __init__(self, gateway: AbstractStorageGateway):
        self.gateway = gateway

    def cleanup(self, session: RecordingSession) -> CleanupResult:
        """Delete every chunk in the session independently.

        The session identity is reset only when every deletion succeeded.
        Otherwise ``saved_chunks`` keeps just the failed descriptors and the
        id and index stay as they are, so the remainder can be retried.

        Args:
            session: Session whose saved chunks should be deleted

        Returns:
            CleanupResult partitioned into deleted and failed chunks
        """
        chunks = list(session.saved_chunks)
        result = CleanupResult()

        if chunks:
            logger.info(f"Cleaning up {len(chunks)} auto-save files for {session.session_id}")
            session.cleanup_attempts += 1

        for chunk in chunks:
            try:
                outcome = self.gateway.delete_chunk(chunk.file_path)
            except Exception as e:
                outcome = DeleteResult(success=False, error=str(e))

            if outcome.success:
                result.deleted.append(chunk)
            else:
                logger.error(f"Failed to delete chunk {chunk.filename}: {outcome.error}")
                result.failed.append(chunk)

        if result.failed:
            logger.warning(f"Deleted {len(result.deleted)} chunks, {len(result.failed)} failed; "
                           f"keeping session {session.session_id} open for retry")
            session.saved_chunks = list(result.failed)
        else:
            if chunks:
                logger.info(f"Deleted {len(result.deleted)} chunks")
            session.reset()
            result.session_reset = True

        return result
