"""Reassembles saved chunks and the trailing buffer into one recording."""

import logging
from typing import List

from ..models.results import CombineResult
from ..models.session import ChunkDescriptor
from ..storage.gateway import AbstractStorageGateway

logger = logging.getLogger(__name__)


class Combiner:
    """Concatenates persisted chunks in index order, followed by the trailing bytes."""

    def __init__(self, gateway: AbstractStorageGateway):
        self.gateway = gateway

    def combine(self, saved_chunks: List[ChunkDescriptor], trailing: bytes) -> CombineResult:
        """Build the final recording.

        A chunk that cannot be loaded is skipped and the rest are still
        combined. If combination fails outright, the trailing buffer alone
        is returned.
        """
        trailing = trailing or b""
        if not saved_chunks:
            return CombineResult(audio_data=trailing)

        logger.info(f"Combining {len(saved_chunks)} saved chunks with {len(trailing)} trailing bytes")

        try:
            parts = []
            loaded, skipped = [], []
            for chunk in sorted(saved_chunks, key=lambda c: c.chunk_index):
                try:
                    parts.append(self.gateway.read_chunk(chunk.file_path))
                    loaded.append(chunk.chunk_index)
                except Exception as e:
                    logger.error(f"Failed to load chunk {chunk.filename}: {e}")
                    skipped.append(chunk.chunk_index)

            parts.append(trailing)
            combined = b"".join(parts)

        except Exception as e:
            logger.error(f"Error combining recording chunks, keeping trailing audio only: {e}")
            return CombineResult(audio_data=trailing, used_fallback=True, error=str(e),
                                 skipped_indices=[c.chunk_index for c in saved_chunks])

        if skipped:
            logger.warning(f"Combined recording is missing {len(skipped)} chunk(s): {skipped}")
        logger.info(f"Combined recording: {len(combined)} bytes from {len(loaded)} chunks")

        return CombineResult(audio_data=combined, loaded_indices=loaded, skipped_indices=skipped)
