"""Subtitle codec to file extension mapping."""

from pathlib import Path

DEFAULT_EXTENSION = "srt"

VOBSUB_CODEC = "S_VOBSUB"
VOBSUB_INDEX_EXTENSION = "idx"
VOBSUB_PAYLOAD_EXTENSION = "sub"

# Matroska codec IDs as reported by mkvmerge -J
SUBTITLE_EXTENSION_BY_CODEC = {
    "S_TEXT/UTF8": "srt",
    "S_TEXT/ASCII": "srt",
    "S_TEXT/SSA": "ssa",
    "S_TEXT/ASS": "ass",
    "S_SSA": "ssa",
    "S_ASS": "ass",
    "S_TEXT/USF": "usf",
    "S_TEXT/WEBVTT": "vtt",
    "S_HDMV/PGS": "sup",
    "S_HDMV/TEXTST": "textst",
    VOBSUB_CODEC: VOBSUB_PAYLOAD_EXTENSION,
    "S_DVBSUB": "dvbsub",
    "S_KATE": "kate",
}

KNOWN_EXTENSIONS = frozenset(SUBTITLE_EXTENSION_BY_CODEC.values())


def extension_for_codec(codec_id: str) -> str:
    """Get the output file extension for a subtitle codec.

    Args:
        codec_id: Matroska codec ID (e.g., 'S_TEXT/UTF8')

    Returns:
        Extension without dot (e.g., 'srt'); unknown codecs fall back to 'srt'.
        VOBSUB always maps to 'sub', the payload half of its idx/sub pair.
    """
    if codec_id == VOBSUB_CODEC:
        return VOBSUB_PAYLOAD_EXTENSION
    return SUBTITLE_EXTENSION_BY_CODEC.get(codec_id, DEFAULT_EXTENSION)


def is_known_format(token: str) -> bool:
    """Check whether a token names a known subtitle format extension."""
    return token.lower() in KNOWN_EXTENSIONS


def format_matches(codec_id: str, token: str) -> bool:
    """Check if a codec produces files of the given format."""
    return extension_for_codec(codec_id).lower() == token.lower()


def codec_label(codec_id: str) -> str:
    """Get an upper-case format label for display, or 'Unknown'."""
    extension = SUBTITLE_EXTENSION_BY_CODEC.get(codec_id)
    return extension.upper() if extension else "Unknown"


def output_files_for(destination: Path, codec_id: str) -> list[Path]:
    """List the files mkvextract writes for one destination path.

    VOBSUB tracks produce an index file and a payload file sharing
    the same base name.

    Args:
        destination: Path passed to mkvextract
        codec_id: Matroska codec ID of the track

    Returns:
        Paths of all files created for this destination
    """
    if codec_id == VOBSUB_CODEC:
        return [
            destination.with_suffix(f".{VOBSUB_INDEX_EXTENSION}"),
            destination.with_suffix(f".{VOBSUB_PAYLOAD_EXTENSION}"),
        ]
    return [destination]
