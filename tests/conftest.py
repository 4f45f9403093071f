"""Shared pytest fixtures for SubScalpel tests."""

import json

import pytest

from subscalpel.config import Config, ProcessingConfig, Profile
from subscalpel.models.track import Track


@pytest.fixture
def default_config():
    """Create a configuration that extracts directly from the input."""
    return Config(processing=ProcessingConfig(remux_first=False))


@pytest.fixture
def remux_config():
    """Create a configuration that muxes into a temporary .mks first."""
    return Config(processing=ProcessingConfig(remux_first=True))


@pytest.fixture
def profile_config():
    """Create a configuration with top-level defaults and profiles."""
    return Config(
        default_languages=["eng"],
        exclusions=["sup"],
        output_template="{basename}.{language}.{extension}",
        profiles={
            "anime": Profile(languages=["jpn", "eng"], output_dir="subs"),
            "forced": Profile(exclusions=["chi"]),
        },
    )


@pytest.fixture
def sample_tracks():
    """Create sample subtitle tracks as mkvmerge reports them."""
    return [
        Track(
            id=2,
            number=3,
            codec_id="S_TEXT/UTF8",
            language="eng",
            track_name="English",
            default=True,
        ),
        Track(
            id=3,
            number=4,
            codec_id="S_TEXT/ASS",
            language="spa",
            track_name="Español",
        ),
        Track(
            id=4,
            number=5,
            codec_id="S_HDMV/PGS",
            language="chi",
            track_name="Chinese",
        ),
        Track(
            id=5,
            number=6,
            codec_id="S_TEXT/UTF8",
            language="eng",
            track_name="Signs/Songs",
            forced=True,
        ),
    ]


@pytest.fixture
def mkvmerge_document():
    """Create a trimmed mkvmerge -J document with video, audio and subtitles."""
    return {
        "container": {"type": "Matroska", "recognized": True, "supported": True},
        "tracks": [
            {
                "id": 0,
                "type": "video",
                "codec": "HEVC/H.265/MPEG-H",
                "properties": {"number": 1, "codec_id": "V_MPEGH/ISO/HEVC", "language": "und"},
            },
            {
                "id": 1,
                "type": "audio",
                "codec": "AAC",
                "properties": {"number": 2, "codec_id": "A_AAC", "language": "jpn"},
            },
            {
                "id": 2,
                "type": "subtitles",
                "codec": "SubRip/SRT",
                "properties": {
                    "number": 3,
                    "codec_id": "S_TEXT/UTF8",
                    "language": "eng",
                    "track_name": "English",
                    "default_track": True,
                    "forced_track": False,
                },
            },
            {
                "id": 3,
                "type": "subtitles",
                "codec": "VobSub",
                "properties": {
                    "number": 4,
                    "codec_id": "S_VOBSUB",
                    "language": "fre",
                    "default_track": False,
                    "forced_track": True,
                },
            },
        ],
    }


@pytest.fixture
def mkvmerge_output(mkvmerge_document):
    """Serialized mkvmerge -J output."""
    return json.dumps(mkvmerge_document)


@pytest.fixture
def mkv_file(tmp_path):
    """Create an empty MKV file."""
    file_path = tmp_path / "movie.mkv"
    file_path.write_bytes(b"")
    return file_path
