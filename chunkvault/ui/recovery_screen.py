"""Console screens for auto-save progress and orphan recovery."""

import logging
from typing import Any, Dict, List, Optional

from pubsub import pub
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from ..autosave.publisher import PROGRESS_TOPIC, STATUS_TOPIC
from ..models.events import AutoSaveEvent, AutoSaveStatusEvent, RecoverableSession

logger = logging.getLogger(__name__)


class RecoveryScreen:
    """Prints auto-save notifications and asks what to do with orphaned sessions."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self._subscribed = False

    def subscribe(self) -> None:
        """Start printing auto-save progress and status messages."""
        if self._subscribed:
            return
        pub.subscribe(self.on_progress, PROGRESS_TOPIC)
        pub.subscribe(self.on_status, STATUS_TOPIC)
        self._subscribed = True

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        pub.unsubscribe(self.on_progress, PROGRESS_TOPIC)
        pub.unsubscribe(self.on_status, STATUS_TOPIC)
        self._subscribed = False

    def on_progress(self, event: AutoSaveEvent) -> None:
        self.console.print(f"💾 Recording... (Auto-saved {event.chunk_count} chunks, "
                           f"{event.bytes_saved / 1024:.0f} KB)", style="green")

    def on_status(self, event: AutoSaveStatusEvent) -> None:
        style = "bold yellow" if event.level == "warning" else "blue"
        prefix = "⚠️ " if event.level == "warning" else ""
        self.console.print(f"{prefix}{event.message}", style=style)

    def render_sessions(self, sessions: List[RecoverableSession]) -> None:
        """Show recoverable sessions as a table."""
        if not sessions:
            self.console.print("No incomplete recordings found.", style="green")
            return

        self.console.print(f"🔄 Found {len(sessions)} incomplete recording(s) from previous sessions:",
                           style="bold blue")
        table = Table()
        table.add_column("#", justify="right")
        table.add_column("Session")
        table.add_column("Chunks", justify="right")
        for number, session in enumerate(sessions, start=1):
            table.add_row(str(number), session.session_id, str(session.chunk_count))
        self.console.print(table)

    def prompt_action(self, sessions: List[RecoverableSession]) -> Optional[tuple]:
        """Ask the user what to do with the listed sessions.

        Returns:
            ``("recover", session_id)``, ``("delete", session_id)``,
            ``("delete_all", None)`` or None to leave everything as is
        """
        if not sessions:
            return None

        choice = Prompt.ask("Action: [r]ecover N, [d]elete N, delete [a]ll, [c]ancel", default="c")
        choice = choice.strip().lower()

        if choice in ("a", "all"):
            return ("delete_all", None)

        parts = choice.split()
        if len(parts) == 2 and parts[0] in ("r", "d") and parts[1].isdigit():
            index = int(parts[1]) - 1
            if 0 <= index < len(sessions):
                action = "recover" if parts[0] == "r" else "delete"
                return (action, sessions[index].session_id)

        if choice not in ("c", "cancel"):
            self.console.print(f"Unrecognized choice: {choice}", style="red")
        return None

    def render_status(self, status: Dict[str, Any]) -> None:
        """Show recorder state, pending auto-save storage and capture statistics."""
        table = Table(title="ChunkVault status", show_header=False)
        table.add_column("Field")
        table.add_column("Value", justify="right")
        table.add_row("State", status["state"])
        table.add_row("Session", status.get("session_id") or "-")
        table.add_row("Chunks saved", str(status.get("chunks_saved", 0)))

        storage = status.get("storage") or {}
        if storage:
            table.add_row("Pending chunk files", f"{storage['chunk_files']} ({storage['chunk_mb']} MB)")
            table.add_row("Saved recordings", str(storage["recording_files"]))

        audio = status.get("audio")
        if audio:
            table.add_row("Duration", f"{audio['duration_seconds']:.1f}s")
            table.add_row("Peak level", f"{audio['peak_level']:.0%}")
        self.console.print(table)
