"""Track selection data models."""

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class NumberToken:
    """Token naming a track number."""

    raw: str
    number: int


@dataclass(frozen=True)
class LanguageToken:
    """Token naming a language code."""

    raw: str
    code: str


@dataclass(frozen=True)
class FormatToken:
    """Token naming a subtitle format extension (always lower-case)."""

    raw: str
    extension: str


@dataclass(frozen=True)
class InvalidToken:
    """Token that is not a usable number, language, or format."""

    raw: str
    reason: str


SelectionToken = Union[NumberToken, LanguageToken, FormatToken, InvalidToken]


@dataclass
class TrackFilter:
    """Languages, track numbers and formats a user asked for.

    An empty filter matches everything when used for selection and
    nothing when used for exclusion.
    """

    language_codes: list[str] = field(default_factory=list)
    track_numbers: list[int] = field(default_factory=list)
    format_filters: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Whether no criteria are set."""
        return not (self.language_codes or self.track_numbers or self.format_filters)

    def add(self, token: SelectionToken) -> None:
        """Add a classified token, ignoring duplicates and invalid tokens."""
        if isinstance(token, NumberToken):
            if token.number not in self.track_numbers:
                self.track_numbers.append(token.number)
        elif isinstance(token, LanguageToken):
            if token.code not in self.language_codes:
                self.language_codes.append(token.code)
        elif isinstance(token, FormatToken):
            if token.extension not in self.format_filters:
                self.format_filters.append(token.extension)

    def describe(self) -> str:
        """Describe the criteria, e.g. 'languages: eng,spa, track IDs: [14]'."""
        parts = []
        if self.language_codes:
            parts.append(f"languages: {','.join(self.language_codes)}")
        if self.track_numbers:
            parts.append(f"track IDs: [{' '.join(str(n) for n in self.track_numbers)}]")
        if self.format_filters:
            parts.append(f"formats: {','.join(self.format_filters)}")
        return ", ".join(parts)


@dataclass
class TrackSelection(TrackFilter):
    """Inclusion filter plus an exclusion filter applied as a veto."""

    exclusions: TrackFilter = field(default_factory=TrackFilter)

    @classmethod
    def from_filters(
        cls, include: TrackFilter, exclude: TrackFilter | None = None
    ) -> "TrackSelection":
        """Combine an inclusion and an exclusion filter."""
        return cls(
            language_codes=list(include.language_codes),
            track_numbers=list(include.track_numbers),
            format_filters=list(include.format_filters),
            exclusions=exclude if exclude is not None else TrackFilter(),
        )

    def describe(self) -> str:
        """Build the user-facing message for this selection."""
        included = super().describe()
        excluded = self.exclusions.describe()

        if not included:
            if excluded:
                return f"Extracting all tracks except {excluded}"
            return "Extracting all subtitle tracks"

        message = f"Extracting tracks for {included}"
        if excluded:
            message = f"{message}, excluding {excluded}"
        return message
