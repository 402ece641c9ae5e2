"""Unit tests for the chunk naming convention."""

import pytest
from datetime import datetime

from chunkvault.storage.naming import (
    CHUNK_PREFIX,
    chunk_filename,
    generate_session_id,
    parse_chunk_filename,
)


@pytest.mark.unit
class TestNaming:

    def test_session_id_format(self):
        session_id = generate_session_id(datetime(2024, 3, 5, 14, 7, 9))

        assert session_id.startswith(f"{CHUNK_PREFIX}20240305_140709_")
        assert len(session_id.rsplit("_", 1)[1]) == 8

    def test_session_ids_are_unique_in_rapid_succession(self):
        now = datetime(2024, 1, 1, 12, 0, 0)
        ids = {generate_session_id(now) for _ in range(200)}

        assert len(ids) == 200

    def test_chunk_filename_zero_pads_index(self):
        assert chunk_filename("recording_20240101_120000_abcd1234", 7) == \
            "recording_20240101_120000_abcd1234_chunk_007.pcm"
        assert chunk_filename("recording_20240101_120000_abcd1234", 12, "webm") == \
            "recording_20240101_120000_abcd1234_chunk_012.webm"

    def test_chunk_filename_rejects_negative_index(self):
        with pytest.raises(ValueError):
            chunk_filename("recording_20240101_120000_abcd1234", -1)

    def test_filenames_sort_in_capture_order(self):
        session_id = generate_session_id()
        names = [chunk_filename(session_id, i) for i in range(15)]

        assert sorted(reversed(names)) == names

    def test_parse_round_trip_with_directory(self):
        session_id = generate_session_id()
        path = f"/tmp/recordings/{chunk_filename(session_id, 42)}"

        assert parse_chunk_filename(path) == (session_id, 42)

    def test_parse_large_index(self):
        assert parse_chunk_filename("recording_20240101_120000_abcd1234_chunk_1234.pcm") == \
            ("recording_20240101_120000_abcd1234", 1234)

    @pytest.mark.parametrize("name", [
        "notes.txt",
        "recording_20240101_120000_abcd1234_chunk_000.pcm.part",
        "recording_20240101_120000_abcd1234.wav",
        "recording_2024_abcd_chunk_000.pcm",
    ])
    def test_parse_rejects_other_files(self, name):
        assert parse_chunk_filename(name) is None
