"""Track matching against selection and exclusion filters."""

from typing import Iterable

from subscalpel.models.selection import TrackFilter, TrackSelection
from subscalpel.models.track import Track
from subscalpel.utils.formats import format_matches
from subscalpel.utils.language import language_matches


def filter_hits(track: Track, track_filter: TrackFilter) -> bool:
    """Check whether any criterion of a non-empty filter matches the track.

    Criteria are combined with OR, both across and within categories.
    """
    if track.number in track_filter.track_numbers:
        return True

    if any(language_matches(track.language, code) for code in track_filter.language_codes):
        return True

    return any(format_matches(track.codec_id, fmt) for fmt in track_filter.format_filters)


def exclusion_matches(track: Track, exclusions: TrackFilter) -> bool:
    """Check if a track is vetoed by an exclusion filter.

    An empty exclusion filter excludes nothing.
    """
    if exclusions.is_empty:
        return False
    return filter_hits(track, exclusions)


def matches(track: Track, selection: TrackSelection) -> bool:
    """Decide whether a track takes part in extraction.

    Rules, in order:
    1. Excluded tracks never match.
    2. An empty selection matches every remaining track.
    3. Otherwise the track must match a number, language, or format.

    Args:
        track: Track to test
        selection: Selection with exclusions

    Returns:
        True if the track is selected
    """
    if exclusion_matches(track, selection.exclusions):
        return False

    if selection.is_empty:
        return True

    return filter_hits(track, selection)


def select_tracks(tracks: Iterable[Track], selection: TrackSelection) -> list[Track]:
    """Return the subtitle tracks matching a selection, in container order."""
    return [track for track in tracks if track.is_subtitle and matches(track, selection)]
