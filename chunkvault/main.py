"""Main application entry point for ChunkVault."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from chunkvault.services.recording_service import RecordingService
from chunkvault.ui.recovery_screen import RecoveryScreen

from .config import ChunkVaultConfig

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = ChunkVaultConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.service = RecordingService(self.config)
        self.screen = RecoveryScreen()
        self.should_exit = False

    def startup_scan(self) -> None:
        """Offer to recover recordings left behind by a crashed run."""
        removed = self.service.gateway.remove_partial_files()
        if removed:
            logger.info(f"Removed {removed} partial chunk files")

        sessions = self.service.check_for_orphans()
        if not sessions:
            return

        self.screen.render_sessions(sessions)
        action = self.screen.prompt_action(sessions)
        if action is None:
            return

        kind, session_id = action
        if kind == "recover":
            result = self.service.recover_session(session_id)
            if result["success"]:
                self.screen.console.print(f"✅ Recovered to {result['recording_path']}", style="green")
            else:
                self.screen.console.print(f"❌ Failed to recover recording: {result['error']}", style="red")
        elif kind == "delete":
            self.service.delete_session_chunks(session_id)
        elif kind == "delete_all":
            self.service.delete_all_orphans()

    def run(self, duration: int) -> None:
        self.screen.subscribe()
        try:
            result = self.service.start_recording()
            if not result["success"]:
                raise RuntimeError(result["error"])
            if duration:
                time.sleep(duration)
            else:
                while not self.should_exit:
                    time.sleep(1)
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        status = self.service.get_status()
        result = self.service.stop_recording()
        if status.get("audio"):
            self.screen.render_status(status)
        if result.get("recording_path"):
            self.screen.console.print(f"✅ Recording saved: {result['recording_path']} "
                                      f"({result['size_bytes']} bytes)", style="green")
        elif result.get("session_id") or result.get("size_bytes"):
            self.screen.console.print("❌ Recording could not be saved; auto-save files were kept", style="red")
        self.screen.unsubscribe()


def setup_logging(config: ChunkVaultConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', str(Path(config.get_data_directory()) / "logs" / "chunkvault.log"))
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("=" * 50)
    logger.info("ChunkVault starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ChunkVault - audio recording with crash-recoverable auto-save"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="ChunkVault v0.1.0"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    record = commands.add_parser("record", help="Record from the microphone")
    record.add_argument("--duration", type=int, default=0,
                        help="Seconds to record (default: until Ctrl+C)")
    record.add_argument("--skip-scan", action="store_true",
                        help="Do not check for incomplete recordings first")

    commands.add_parser("scan", help="List incomplete recordings from earlier runs")

    recover = commands.add_parser("recover", help="Rebuild an incomplete recording")
    recover.add_argument("session_id")
    recover.add_argument("--output", type=str, help="Output filename inside the recordings directory")

    delete = commands.add_parser("delete", help="Delete the auto-save files of one session")
    delete.add_argument("session_id")

    commands.add_parser("delete-all", help="Delete the auto-save files of every incomplete recording")

    commands.add_parser("status", help="Show pending auto-save storage and saved recordings")

    return parser


def main() -> None:
    """Main entry point for ChunkVault."""
    args = build_parser().parse_args()

    server = Server(args.config, args.log_level)
    console = server.screen.console
    try:
        if args.command == "record":
            if not args.skip_scan:
                server.startup_scan()
            server.run(args.duration)
        elif args.command == "scan":
            server.screen.render_sessions(server.service.check_for_orphans())
        elif args.command == "recover":
            result = server.service.recover_session(args.session_id, args.output)
            if not result["success"]:
                console.print(f"❌ Failed to recover recording: {result['error']}", style="red")
                sys.exit(1)
            console.print(f"✅ Recovered {result['chunks_loaded']} chunks to {result['recording_path']}",
                          style="green")
        elif args.command == "delete":
            result = server.service.delete_session_chunks(args.session_id)
            console.print(f"Deleted {result['deleted']} chunks ({result['failed']} failed)")
        elif args.command == "delete-all":
            result = server.service.delete_all_orphans()
            console.print(f"Deleted {result['deleted']} chunks ({result['failed']} failed)")
        elif args.command == "status":
            server.screen.render_status(server.service.get_status())
    except KeyboardInterrupt:
        server.cleanup()
        console.print("\n👋 Goodbye!")
    except Exception as e:
        console.print(f"❌ Error: {e}", style="red")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
