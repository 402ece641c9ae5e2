"""Unit tests for the command line entry point."""

import pytest

from chunkvault.main import build_parser


@pytest.mark.unit
class TestParser:

    def test_record_defaults(self):
        args = build_parser().parse_args(["record"])

        assert args.command == "record"
        assert args.duration == 0
        assert args.skip_scan is False
        assert args.config is None

    def test_recover_with_output(self):
        args = build_parser().parse_args(["--config", "c.yaml", "recover", "recording_x", "--output", "out.wav"])

        assert args.config == "c.yaml"
        assert args.session_id == "recording_x"
        assert args.output == "out.wav"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_status_command(self):
        args = build_parser().parse_args(["status"])

        assert args.command == "status"
