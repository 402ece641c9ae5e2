"""Auto-save notification publisher for pub/sub event publishing."""

import logging
from typing import List

from pubsub import pub

from ..models.events import AutoSaveEvent, AutoSaveStatusEvent, RecoverableSession

logger = logging.getLogger(__name__)

PROGRESS_TOPIC = "autosave.progress"
STATUS_TOPIC = "autosave.status"
RECOVERY_TOPIC = "recovery.sessions"


class AutoSavePublisher:
    """Publishes auto-save progress, status and recovery events using pubsub.pub.

    A failing listener is logged and never reaches the recording pipeline.
    """

    def __init__(self,
                 progress_topic: str = PROGRESS_TOPIC,
                 status_topic: str = STATUS_TOPIC,
                 recovery_topic: str = RECOVERY_TOPIC):
        self.progress_topic = progress_topic
        self.status_topic = status_topic
        self.recovery_topic = recovery_topic

    def _send(self, topic: str, **kwargs) -> bool:
        try:
            pub.sendMessage(topic, **kwargs)
            return True
        except Exception as e:
            logger.error(f"Listener for {topic} failed: {e}", exc_info=True)
            return False

    def publish_progress(self, event: AutoSaveEvent) -> None:
        if self._send(self.progress_topic, event=event):
            logger.debug(f"Published auto-save progress: {event.session_id} ({event.chunk_count} chunks)")

    def publish_status(self, message: str, level: str = "info", session_id: str = "") -> None:
        """Publish a status message for the UI.

        Args:
            message: Human readable status text
            level: "info" or "warning"
            session_id: Session the message refers to, if any
        """
        event = AutoSaveStatusEvent(message=message, level=level, session_id=session_id or "")
        if self._send(self.status_topic, event=event):
            logger.debug(f"Published auto-save status ({level}): {message}")

    def publish_recoverable_sessions(self, sessions: List[RecoverableSession]) -> None:
        if self._send(self.recovery_topic, sessions=sessions):
            logger.debug(f"Published {len(sessions)} recoverable sessions")
