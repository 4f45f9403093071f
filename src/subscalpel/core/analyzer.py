"""Track analysis using mkvmerge -J."""

import json
import subprocess
from pathlib import Path
from typing import Any, Optional

from subscalpel.exceptions import TrackInfoError
from subscalpel.models.track import ContainerInfo, Track
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)

MATROSKA_CONTAINER_TYPE = "matroska"


def parse_track(record: dict[str, Any]) -> Track:
    """Convert one mkvmerge track record into a Track."""
    properties = record.get("properties") or {}
    return Track(
        id=int(record.get("id", 0)),
        number=int(properties.get("number", 0)),
        codec_id=properties.get("codec_id", ""),
        language=properties.get("language") or "",
        track_name=properties.get("track_name") or None,
        forced=bool(properties.get("forced_track", False)),
        default=bool(properties.get("default_track", False)),
        type=record.get("type", ""),
        codec=record.get("codec", ""),
    )


def parse_track_info(data: dict[str, Any], file_path: Path) -> ContainerInfo:
    """Convert an mkvmerge -J document into ContainerInfo.

    Args:
        data: Decoded JSON document
        file_path: File the document describes

    Returns:
        ContainerInfo with all tracks in container order

    Raises:
        TrackInfoError: If the container is not Matroska
    """
    container_type = str((data.get("container") or {}).get("type") or "")
    if container_type.strip().lower() != MATROSKA_CONTAINER_TYPE:
        raise TrackInfoError(
            f"File is not a valid Matroska container: {file_path}",
            details=f"container type: {container_type or 'unknown'}",
        )

    tracks = [parse_track(record) for record in data.get("tracks") or []]
    return ContainerInfo(path=file_path, container_type=container_type, tracks=tracks)


class TrackAnalyzer:
    """Read track metadata from MKV files with mkvmerge."""

    def __init__(self, mkvmerge: str = "mkvmerge", timeout_seconds: Optional[int] = None):
        """Initialize analyzer.

        Args:
            mkvmerge: mkvmerge executable
            timeout_seconds: Optional timeout; None waits indefinitely
        """
        self.mkvmerge = mkvmerge
        self.timeout_seconds = timeout_seconds

    def analyze(self, file_path: Path) -> ContainerInfo:
        """Query track information for a file.

        Args:
            file_path: Path to MKV/MKS file

        Returns:
            ContainerInfo for the file

        Raises:
            TrackInfoError: If mkvmerge fails or returns unusable output
        """
        logger.debug("Analyzing tracks", file=str(file_path))

        cmd = [self.mkvmerge, "-J", str(file_path)]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as e:
            logger.error("mkvmerge not found", executable=self.mkvmerge)
            raise TrackInfoError(
                "mkvmerge not found - is MKVToolNix installed?", details=str(e)
            ) from e
        except subprocess.TimeoutExpired as e:
            logger.error("mkvmerge timeout", file=str(file_path), timeout=self.timeout_seconds)
            raise TrackInfoError(f"Timed out analyzing tracks: {file_path}") from e
        except subprocess.CalledProcessError as e:
            logger.error(
                "mkvmerge failed",
                file=str(file_path),
                returncode=e.returncode,
                stderr=e.stderr,
            )
            raise TrackInfoError(
                f"Error analyzing tracks: {file_path}",
                details=(e.stdout or "") + (e.stderr or ""),
            ) from e

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse mkvmerge output", file=str(file_path), error=str(e))
            raise TrackInfoError(
                f"Error parsing track information: {file_path}", details=str(e)
            ) from e

        info = parse_track_info(data, file_path)

        logger.info(
            "Subtitle tracks analyzed",
            file=str(file_path),
            track_count=len(info.tracks),
            subtitle_count=len(info.subtitle_tracks),
            languages=[t.language for t in info.subtitle_tracks],
        )
        return info
