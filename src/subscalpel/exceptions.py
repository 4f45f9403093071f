"""Exception classes for SubScalpel.

Every error carries a one-line ``message`` suitable for the terminal and an
optional ``details`` string (usually the diagnostic output of mkvmerge or
mkvextract) for debugging.
"""

from typing import Optional


class SubscalpelError(Exception):
    """Base exception for all SubScalpel errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class InputValidationError(SubscalpelError):
    """Raised when an input file is missing, a directory, or not an MKV file."""

    def __init__(self, path, reason: str):
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class TrackInfoError(SubscalpelError):
    """Raised when track metadata cannot be read from a container."""


class InvalidSelectionError(SubscalpelError):
    """Raised when the validating parser rejects one or more tokens."""

    def __init__(self, invalid_tokens: list[str], kind: str = "selection"):
        joined = ", ".join(f"'{token}'" for token in invalid_tokens)
        super().__init__(
            f"Unknown {kind} language code, format, or invalid track ID: {joined}"
        )
        self.invalid_tokens = list(invalid_tokens)
        self.kind = kind


class NoMatchingTracksError(SubscalpelError):
    """Raised when a selection matches no subtitle track."""

    def __init__(self, path):
        super().__init__(f"No subtitle tracks match the selection criteria: {path}")
        self.path = path


class ExtractionError(SubscalpelError):
    """Raised when mkvmerge or mkvextract fails."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.returncode = returncode


class ConfigError(SubscalpelError):
    """Raised for invalid configuration or an unknown profile."""
