"""Extraction job and result data models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from subscalpel.models.track import Track
from subscalpel.utils.formats import output_files_for

# Output directory marker meaning "{inputdir}/{basename}-subtitles" per input file
DEFERRED_OUTPUT_DIR = "__BASENAME_SUBTITLES__"

DEFAULT_OUTPUT_TEMPLATE = "{basename}.{language}.{trackno}.{trackname}.{forced}.{default}.{extension}"


@dataclass
class OutputSpec:
    """Where and under which name extracted subtitles are written."""

    output_directory: Optional[str] = None  # None: next to the input file
    template: str = DEFAULT_OUTPUT_TEMPLATE

    @property
    def is_deferred(self) -> bool:
        """Whether the directory is derived per input file."""
        return self.output_directory == DEFERRED_OUTPUT_DIR


class FileState(str, Enum):
    """Processing state of one input file."""

    PENDING = "pending"
    FILTERING = "filtering"
    ABORTED_EMPTY = "aborted_empty"
    EXTRACTING = "extracting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DRY_RUN = "dry_run"


@dataclass
class ExtractionJob:
    """One track to extract from one source container."""

    source: Path  # Container mkvextract reads from (input file or temp .mks)
    track_id: int  # Query-local id inside ``source``
    track: Track  # Track as reported for the original input, used for naming
    destination: Path

    @property
    def output_files(self) -> list[Path]:
        """All files this job produces (two for VOBSUB)."""
        return output_files_for(self.destination, self.track.codec_id)

    def __str__(self) -> str:
        return f"Track {self.track.number} ({self.track.language}) -> {self.destination}"


@dataclass
class TrackFailure:
    """Extraction error for a single track in per-track mode."""

    job: ExtractionJob
    error: str


@dataclass
class ProcessResult:
    """Result of processing a single file."""

    state: FileState
    file_path: Path
    jobs: list[ExtractionJob] = field(default_factory=list)
    error: Optional[str] = None
    details: Optional[str] = None
    failures: list[TrackFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the file counts as a success."""
        return self.state in (FileState.SUCCEEDED, FileState.DRY_RUN)

    @property
    def output_files(self) -> list[Path]:
        """Every file written (or that would be written) for this input."""
        return [path for job in self.jobs for path in job.output_files]

    def __str__(self) -> str:
        """Human-readable representation."""
        name = self.file_path.name
        if self.state == FileState.SUCCEEDED:
            return f"{name}: extracted {len(self.jobs)} subtitle track(s)"
        if self.state == FileState.DRY_RUN:
            return f"{name}: would extract {len(self.jobs)} subtitle track(s) (dry run)"
        if self.state == FileState.ABORTED_EMPTY:
            return f"{name}: {self.error or 'no subtitle tracks match the selection'}"
        return f"{name}: failed ({self.error})"


@dataclass
class BatchSummary:
    """Aggregate result of a batch run."""

    results: list[ProcessResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded
