"""Extraction pipeline orchestrator."""

import time
from collections import defaultdict
from pathlib import Path
from typing import Callable, Optional

from subscalpel.config import Config
from subscalpel.core.analyzer import TrackAnalyzer
from subscalpel.core.executor import MKVToolNixExecutor, temp_mks_path
from subscalpel.core.matcher import select_tracks
from subscalpel.core.naming import resolve_output_path
from subscalpel.core.scanner import validate_input_file
from subscalpel.exceptions import (
    ExtractionError,
    NoMatchingTracksError,
    SubscalpelError,
)
from subscalpel.models.file import (
    ExtractionJob,
    FileState,
    OutputSpec,
    ProcessResult,
    TrackFailure,
)
from subscalpel.models.selection import TrackSelection
from subscalpel.models.track import ContainerInfo, Track
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)


def group_jobs(jobs: list[ExtractionJob]) -> dict[Path, list[ExtractionJob]]:
    """Group jobs by source container, keeping job order within each group."""
    groups: dict[Path, list[ExtractionJob]] = defaultdict(list)
    for job in jobs:
        groups[job.source].append(job)
    return dict(groups)


def rebind_jobs(jobs: list[ExtractionJob], remuxed: ContainerInfo) -> list[ExtractionJob]:
    """Point jobs at the tracks of a remuxed container.

    The remuxed file holds the selected subtitle tracks in their original
    order but renumbered, so tracks are paired by position. Each job keeps
    its original track and destination.

    Raises:
        ExtractionError: If the remuxed file holds a different number of tracks
    """
    remuxed_tracks = remuxed.subtitle_tracks
    if len(remuxed_tracks) != len(jobs):
        raise ExtractionError(
            f"Track count mismatch in {remuxed.path.name}",
            details=f"expected {len(jobs)} subtitle tracks, found {len(remuxed_tracks)}",
        )

    return [
        ExtractionJob(
            source=remuxed.path,
            track_id=remuxed_track.id,
            track=job.track,
            destination=job.destination,
        )
        for job, remuxed_track in zip(jobs, remuxed_tracks)
    ]


class ExtractionPipeline:
    """Orchestrates subtitle extraction for one file at a time.

    Per-file states: pending -> filtering -> (aborted_empty | extracting)
    -> (succeeded | failed). Dry runs stop after filtering.
    """

    def __init__(
        self,
        config: Config,
        analyzer: Optional[TrackAnalyzer] = None,
        executor: Optional[MKVToolNixExecutor] = None,
    ):
        """Initialize the pipeline.

        Args:
            config: Application configuration
            analyzer: Track analyzer (built from config if omitted)
            executor: MKVToolNix executor (built from config if omitted)
        """
        self.config = config
        timeout = config.processing.timeout_seconds
        self.analyzer = analyzer or TrackAnalyzer(config.tools.mkvmerge, timeout)
        self.executor = executor or MKVToolNixExecutor(
            config.tools.mkvmerge, config.tools.mkvextract, timeout
        )

    def analyze(self, file_path: Path) -> ContainerInfo:
        """Validate an input file and query its tracks.

        Raises:
            InputValidationError: If the path is not an MKV file
            TrackInfoError: If mkvmerge cannot describe the file
        """
        validate_input_file(file_path)
        return self.analyzer.analyze(file_path)

    def plan(
        self,
        file_path: Path,
        tracks: list[Track],
        selection: TrackSelection,
        output_spec: OutputSpec,
    ) -> list[ExtractionJob]:
        """Build extraction jobs for the tracks matching a selection.

        Args:
            file_path: Input file the tracks belong to
            tracks: Tracks from a single metadata query
            selection: Selection with exclusions
            output_spec: Output directory and template

        Returns:
            Jobs in container order (empty if nothing matches)
        """
        selected = select_tracks(tracks, selection)
        return [
            ExtractionJob(
                source=file_path,
                track_id=track.id,
                track=track,
                destination=resolve_output_path(file_path, track, output_spec),
            )
            for track in selected
        ]

    def execute(self, jobs: list[ExtractionJob], per_track: bool = False) -> list[TrackFailure]:
        """Run extraction jobs.

        Grouped mode issues one mkvextract call per source and raises on the
        first failing group. Per-track mode runs each job separately and
        collects failures instead.

        Args:
            jobs: Jobs to run
            per_track: Use one mkvextract call per job

        Returns:
            Failures collected in per-track mode (always empty in grouped mode)

        Raises:
            ExtractionError: If a grouped extraction fails
        """
        if per_track:
            failures = []
            for job in jobs:
                try:
                    self.executor.extract_track(job)
                except ExtractionError as e:
                    logger.error(
                        "Track extraction failed",
                        track_number=job.track.number,
                        error=e.message,
                    )
                    failures.append(TrackFailure(job=job, error=e.message))
            return failures

        for source, group in group_jobs(jobs).items():
            self.executor.extract_tracks(source, group)
        return []

    def _extract(
        self,
        file_path: Path,
        jobs: list[ExtractionJob],
        per_track: bool,
        on_progress: Optional[Callable[[int], None]],
    ) -> tuple[list[ExtractionJob], list[TrackFailure]]:
        if not self.config.processing.remux_first:
            return jobs, self.execute(jobs, per_track=per_track)

        mks_path = temp_mks_path(file_path)
        try:
            mks_path = self.executor.mux_subtitles(
                file_path, [job.track_id for job in jobs], on_progress=on_progress
            )
            remuxed = self.analyzer.analyze(mks_path)
            remuxed_jobs = rebind_jobs(jobs, remuxed)
            return remuxed_jobs, self.execute(remuxed_jobs, per_track=per_track)
        finally:
            if not self.config.processing.keep_temp_files:
                self.executor.cleanup_temp_file(mks_path)

    def process(
        self,
        file_path: Path,
        selection: TrackSelection,
        output_spec: OutputSpec,
        dry_run: bool = False,
        info: Optional[ContainerInfo] = None,
        per_track: bool = False,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> ProcessResult:
        """Process a single file through the complete pipeline.

        Pipeline steps:
        1. Validation and track query (skipped if ``info`` is given)
        2. Filtering (selection, then exclusion veto)
        3. Planning output paths
        4. Extraction (optionally via a temporary .mks)

        Args:
            file_path: Path to the MKV file
            selection: Track selection
            output_spec: Output directory and filename template
            dry_run: Stop after planning
            info: Previously fetched track info for this file
            per_track: Extract each track with its own call
            on_progress: Callback for mkvmerge progress percentages

        Returns:
            ProcessResult with final state and details
        """
        start_time = time.time()
        state = FileState.PENDING
        logger.info("Processing file", file=str(file_path), state=state.value)

        try:
            if info is None:
                info = self.analyze(file_path)

            state = FileState.FILTERING
            logger.debug(
                "Filtering tracks",
                file=str(file_path),
                state=state.value,
                selection=selection.describe(),
            )
            jobs = self.plan(file_path, info.subtitle_tracks, selection, output_spec)

            if not jobs:
                raise NoMatchingTracksError(file_path)

            if dry_run:
                logger.info(
                    "DRY RUN: Would extract tracks",
                    file=str(file_path),
                    track_numbers=[job.track.number for job in jobs],
                )
                return ProcessResult(state=FileState.DRY_RUN, file_path=file_path, jobs=jobs)

            state = FileState.EXTRACTING
            logger.info(
                "Extracting subtitle tracks",
                file=str(file_path),
                state=state.value,
                track_numbers=[job.track.number for job in jobs],
            )
            executed_jobs, failures = self._extract(file_path, jobs, per_track, on_progress)

            duration_ms = int((time.time() - start_time) * 1000)

            if failures:
                logger.error(
                    "Some tracks failed to extract",
                    file=str(file_path),
                    failed=len(failures),
                    duration_ms=duration_ms,
                )
                return ProcessResult(
                    state=FileState.FAILED,
                    file_path=file_path,
                    jobs=executed_jobs,
                    error=f"{len(failures)} of {len(executed_jobs)} track(s) failed to extract",
                    failures=failures,
                )

            logger.info(
                "File processed successfully",
                file=str(file_path),
                state=FileState.SUCCEEDED.value,
                extracted=len(executed_jobs),
                duration_ms=duration_ms,
            )
            return ProcessResult(
                state=FileState.SUCCEEDED, file_path=file_path, jobs=executed_jobs
            )

        except NoMatchingTracksError as e:
            logger.warning("No matching tracks", file=str(file_path), state=FileState.ABORTED_EMPTY.value)
            return ProcessResult(
                state=FileState.ABORTED_EMPTY, file_path=file_path, error=e.message
            )

        except SubscalpelError as e:
            logger.error(
                "Processing failed",
                file=str(file_path),
                state=state.value,
                error=e.message,
                details=e.details,
            )
            return ProcessResult(
                state=FileState.FAILED,
                file_path=file_path,
                error=e.message,
                details=e.details,
            )

        except Exception as e:
            logger.exception("Pipeline error", file=str(file_path), error=str(e))
            return ProcessResult(state=FileState.FAILED, file_path=file_path, error=str(e))
