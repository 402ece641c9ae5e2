"""Finds chunks left behind by earlier runs and rebuilds recordings from them."""

import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..models.events import RecoverableSession
from ..models.results import DeleteResult, DeletionReport, RecoveryResult
from ..storage.gateway import AbstractStorageGateway
from ..storage.naming import CHUNK_PREFIX, parse_chunk_filename
from .publisher import AutoSavePublisher

logger = logging.getLogger(__name__)


class RecoveryCoordinator:
    """Orphan scan plus the recover/delete actions offered to the user.

    Scanning only looks at what is on disk, so it finds sessions from a
    process that crashed before cleanup regardless of in-memory state.
    Recovery never deletes anything; deletion is a separate action.
    """

    def __init__(self,
                 gateway: AbstractStorageGateway,
                 publisher: Optional[AutoSavePublisher] = None,
                 prefix: str = CHUNK_PREFIX):
        self.gateway = gateway
        self.publisher = publisher
        self.prefix = prefix

    def _group_chunks(self, paths: Iterable[str]) -> Dict[str, List[str]]:
        """Group chunk paths by session id, each group in chunk index order."""
        indexed = defaultdict(list)
        for path in paths:
            parsed = parse_chunk_filename(path)
            if parsed is None:
                logger.debug(f"Ignoring file that is not a chunk: {path}")
                continue
            session_id, chunk_index = parsed
            indexed[session_id].append((chunk_index, path))

        return {
            session_id: [path for _, path in sorted(entries)]
            for session_id, entries in indexed.items()
        }

    def scan(self, exclude_session_ids: Iterable[str] = (), publish: bool = True) -> List[RecoverableSession]:
        """Find recoverable sessions ranked by chunk count, most first.

        ``exclude_session_ids`` skips sessions such as the one recording now.
        """
        try:
            paths = self.gateway.list_chunks(self.prefix)
        except Exception as e:
            logger.error(f"Error checking for orphaned recordings: {e}")
            return []

        excluded = set(exclude_session_ids)
        groups = self._group_chunks(paths)
        sessions = [
            RecoverableSession(session_id=session_id, chunk_count=len(chunk_paths), chunk_paths=chunk_paths)
            for session_id, chunk_paths in groups.items()
            if chunk_paths and session_id not in excluded
        ]
        sessions.sort(key=lambda s: (-s.chunk_count, s.session_id))

        if sessions:
            total = sum(s.chunk_count for s in sessions)
            logger.info(f"Found {total} orphaned recording chunks in {len(sessions)} sessions")
            if publish and self.publisher:
                self.publisher.publish_recoverable_sessions(sessions)
        else:
            logger.debug("No orphaned recording chunks found")

        return sessions

    def find_chunks(self, session_id: str) -> List[str]:
        """List a session's chunk paths in chunk index order."""
        paths = self.gateway.list_chunks(f"{session_id}_chunk_")
        return self._group_chunks(paths).get(session_id, [])

    def recover(self, session_id: str) -> RecoveryResult:
        """Rebuild a recording from a session's chunks.

        Unreadable chunks are skipped. Fails if no chunks were found or
        none could be loaded.
        """
        try:
            chunk_paths = self.find_chunks(session_id)
        except Exception as e:
            logger.error(f"Failed to recover recording from chunks: {e}")
            return RecoveryResult(session_id=session_id, success=False, error=str(e))

        if not chunk_paths:
            logger.warning(f"No chunks found for session {session_id}")
            return RecoveryResult(session_id=session_id, success=False, error="no chunks found")

        logger.info(f"Found {len(chunk_paths)} chunks for session {session_id}")

        parts, failed = [], []
        for path in chunk_paths:
            try:
                parts.append(self.gateway.read_chunk(path))
            except Exception as e:
                logger.error(f"Failed to load chunk {path}: {e}")
                failed.append(path)

        if not parts:
            return RecoveryResult(session_id=session_id, success=False,
                                  chunks_found=len(chunk_paths), failed_paths=failed,
                                  error="no chunks could be loaded")

        audio_data = b"".join(parts)
        logger.info(f"Recovered recording from {len(parts)} chunks ({len(audio_data)} bytes)")
        return RecoveryResult(session_id=session_id, success=True, audio_data=audio_data,
                              chunks_found=len(chunk_paths), chunks_loaded=len(parts),
                              failed_paths=failed)

    def _delete_paths(self, paths: Iterable[str]) -> DeletionReport:
        report = DeletionReport()
        for path in paths:
            try:
                outcome = self.gateway.delete_chunk(path)
            except Exception as e:
                outcome = DeleteResult(success=False, error=str(e))

            if outcome.success:
                report.deleted_paths.append(path)
            else:
                logger.error(f"Failed to delete chunk {path}: {outcome.error}")
                report.failed_paths.append(path)
        return report

    def delete_session_chunks(self, session_id: str) -> DeletionReport:
        """Delete every chunk of one orphaned session."""
        try:
            paths = self.find_chunks(session_id)
        except Exception as e:
            logger.error(f"Error listing chunks for session {session_id}: {e}")
            return DeletionReport()

        report = self._delete_paths(paths)
        logger.info(f"Deleted {len(report.deleted_paths)} chunks for session {session_id}"
                    f" ({len(report.failed_paths)} failed)")
        return report

    def delete_all_orphans(self, exclude_session_ids: Iterable[str] = ()) -> DeletionReport:
        """Delete the chunks of every orphaned session."""
        report = DeletionReport()
        for session in self.scan(exclude_session_ids, publish=False):
            partial = self._delete_paths(session.chunk_paths)
            report.deleted_paths.extend(partial.deleted_paths)
            report.failed_paths.extend(partial.failed_paths)

        logger.info(f"All orphaned recording chunks deleted: {len(report.deleted_paths)} "
                    f"({len(report.failed_paths)} failed)")
        return report
