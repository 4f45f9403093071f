"""Parsing of comma-separated track selection expressions.

A selection expression mixes track numbers, language codes and subtitle
format names, e.g. ``eng,14,srt``. Each token is classified in a fixed
order: number first, then language, then format. Anything else is reported
as invalid without stopping the parse.

Two variants exist. The default one accepts any integer as a track number.
The validating one (``available_tracks`` given) only accepts numbers that
exist in the inspected file(s) and reports the others as invalid.
"""

import re
from typing import Callable, Iterable, Optional

from subscalpel.exceptions import InvalidSelectionError
from subscalpel.models.selection import (
    FormatToken,
    InvalidToken,
    LanguageToken,
    NumberToken,
    SelectionToken,
    TrackFilter,
    TrackSelection,
)
from subscalpel.utils.formats import is_known_format
from subscalpel.utils.language import is_known_language
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def split_tokens(raw: Optional[str]) -> list[str]:
    """Split on commas, trim whitespace and drop empty tokens."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def classify_token(
    token: str, available_tracks: Optional[Iterable[int]] = None
) -> SelectionToken:
    """Classify a single trimmed token.

    Args:
        token: Non-empty token
        available_tracks: Track numbers present in the file(s); enables validation

    Returns:
        NumberToken, LanguageToken, FormatToken or InvalidToken
    """
    if _INTEGER.fullmatch(token):
        number = int(token)
        if available_tracks is not None and number not in set(available_tracks):
            return InvalidToken(raw=token, reason="track not available")
        return NumberToken(raw=token, number=number)

    if is_known_language(token):
        return LanguageToken(raw=token, code=token)

    if is_known_format(token):
        return FormatToken(raw=token, extension=token.lower())

    return InvalidToken(raw=token, reason="unknown token")


def _parse(
    raw: Optional[str], kind: str, available_tracks: Optional[Iterable[int]]
) -> tuple[TrackFilter, list[str]]:
    track_filter = TrackFilter()
    invalid_tokens: list[str] = []

    available = set(available_tracks) if available_tracks is not None else None

    for token in split_tokens(raw):
        classified = classify_token(token, available)
        if isinstance(classified, InvalidToken):
            invalid_tokens.append(classified.raw)
            logger.debug(
                f"Skipping invalid {kind} token",
                token=classified.raw,
                reason=classified.reason,
            )
            continue
        track_filter.add(classified)

    logger.debug(
        f"Parsed {kind}",
        raw=raw,
        languages=track_filter.language_codes,
        track_numbers=track_filter.track_numbers,
        formats=track_filter.format_filters,
        invalid=invalid_tokens,
    )
    return track_filter, invalid_tokens


def parse_selection(
    raw: Optional[str], available_tracks: Optional[Iterable[int]] = None
) -> tuple[TrackFilter, list[str]]:
    """Parse a selection expression.

    An empty expression yields an empty filter, which selects every track.

    Args:
        raw: Comma-separated tokens (e.g., 'eng,14,srt')
        available_tracks: Optional track numbers to validate numeric tokens against

    Returns:
        Tuple of (filter, invalid tokens)
    """
    return _parse(raw, "selection", available_tracks)


def parse_exclusion(
    raw: Optional[str], available_tracks: Optional[Iterable[int]] = None
) -> tuple[TrackFilter, list[str]]:
    """Parse an exclusion expression.

    An empty expression yields an empty filter, which excludes nothing.

    Args:
        raw: Comma-separated tokens (e.g., 'chi,sup')
        available_tracks: Optional track numbers to validate numeric tokens against

    Returns:
        Tuple of (filter, invalid tokens)
    """
    return _parse(raw, "exclusion", available_tracks)


def build_selection(
    select: Optional[str],
    exclude: Optional[str] = None,
    available_tracks: Optional[Iterable[int]] = None,
    strict: bool = False,
    on_invalid: Optional[Callable[[str, str], None]] = None,
) -> TrackSelection:
    """Parse both expressions into one TrackSelection.

    Args:
        select: Selection expression
        exclude: Exclusion expression
        available_tracks: Track numbers to validate against (validating variant)
        strict: Raise instead of skipping invalid tokens
        on_invalid: Called with (kind, token) for every skipped token

    Returns:
        Combined selection

    Raises:
        InvalidSelectionError: If strict and any token is invalid
    """
    if available_tracks is not None:
        available_tracks = list(available_tracks)

    include, invalid_include = parse_selection(select, available_tracks)
    if strict and invalid_include:
        raise InvalidSelectionError(invalid_include, kind="selection")

    excluded, invalid_exclude = parse_exclusion(exclude, available_tracks)
    if strict and invalid_exclude:
        raise InvalidSelectionError(invalid_exclude, kind="exclusion")

    if on_invalid is not None:
        for token in invalid_include:
            on_invalid("selection", token)
        for token in invalid_exclude:
            on_invalid("exclusion", token)

    return TrackSelection.from_filters(include, excluded)
