"""Track data models."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

SUBTITLE_TRACK_TYPE = "subtitles"


@dataclass(frozen=True)
class Track:
    """Represents one track reported by mkvmerge -J."""

    id: int  # Query-local stream index, not stable across remuxing
    number: int  # 1-based track number stored in the container
    codec_id: str  # Matroska codec ID (e.g., "S_TEXT/UTF8")
    language: str = ""  # 2- or 3-letter code, possibly empty
    track_name: Optional[str] = None
    forced: bool = False
    default: bool = False
    type: str = SUBTITLE_TRACK_TYPE
    codec: str = ""  # Human-readable codec name from mkvmerge

    @property
    def is_subtitle(self) -> bool:
        """Whether this track is a subtitle track."""
        return self.type == SUBTITLE_TRACK_TYPE

    def __str__(self) -> str:
        """Human-readable representation."""
        flags = ""
        if self.forced:
            flags += " [FORCED]"
        if self.default:
            flags += " [DEFAULT]"
        name_part = f" ({self.track_name})" if self.track_name else ""
        return f"Track {self.number}: {self.language or 'und'}{name_part}{flags}"


@dataclass
class ContainerInfo:
    """Track metadata for one container file, fetched once per run."""

    path: Path
    container_type: str
    tracks: list[Track] = field(default_factory=list)

    @property
    def subtitle_tracks(self) -> list[Track]:
        """Subtitle tracks in container order."""
        return [track for track in self.tracks if track.is_subtitle]

    @property
    def subtitle_track_numbers(self) -> list[int]:
        """Track numbers of all subtitle tracks."""
        return [track.number for track in self.subtitle_tracks]
