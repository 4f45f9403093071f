"""Executors wrapping mkvmerge and mkvextract."""

import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from subscalpel.exceptions import ExtractionError
from subscalpel.models.file import ExtractionJob
from subscalpel.utils.logger import get_logger
from subscalpel.utils.progress import ProgressTracker, format_duration, parse_progress_line

logger = get_logger(__name__)

# MKVToolNix exit codes: 0 success, 1 completed with warnings, 2 error
WARNING_RETURNCODE = 1


def temp_mks_path(input_file: Path) -> Path:
    """Path of the temporary subtitle-only container for an input file."""
    return input_file.parent / f"{input_file.stem}.subtitles.mks"


class MKVToolNixExecutor:
    """Run mkvmerge and mkvextract for subtitle extraction."""

    def __init__(
        self,
        mkvmerge: str = "mkvmerge",
        mkvextract: str = "mkvextract",
        timeout_seconds: Optional[int] = None,
    ):
        """Initialize executor.

        Args:
            mkvmerge: mkvmerge executable
            mkvextract: mkvextract executable
            timeout_seconds: Optional timeout for mkvextract; None waits indefinitely
        """
        self.mkvmerge = mkvmerge
        self.mkvextract = mkvextract
        self.timeout_seconds = timeout_seconds

    def build_mux_command(
        self, input_file: Path, output_file: Path, track_ids: Sequence[int]
    ) -> list[str]:
        """Build the mkvmerge command keeping only the given subtitle tracks."""
        return [
            self.mkvmerge,
            "--gui-mode",
            "-o",
            str(output_file),
            "--no-video",
            "--no-audio",
            "--no-chapters",
            "--no-attachments",
            "--no-global-tags",
            "--no-track-tags",
            "--subtitle-tracks",
            ",".join(str(track_id) for track_id in track_ids),
            str(input_file),
        ]

    def build_extract_command(self, source: Path, jobs: Sequence[ExtractionJob]) -> list[str]:
        """Build one mkvextract call covering every job of a source."""
        cmd = [self.mkvextract, str(source), "tracks"]
        cmd.extend(f"{job.track_id}:{job.destination}" for job in jobs)
        return cmd

    def mux_subtitles(
        self,
        input_file: Path,
        track_ids: Sequence[int],
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> Path:
        """Mux the selected subtitle tracks into a temporary .mks file.

        Args:
            input_file: Source MKV file
            track_ids: Query-local ids of the subtitle tracks to keep
            on_progress: Optional callback receiving increasing percentages

        Returns:
            Path of the created .mks file

        Raises:
            ExtractionError: If mkvmerge cannot be started or fails
        """
        output_file = temp_mks_path(input_file)
        cmd = self.build_mux_command(input_file, output_file, track_ids)

        logger.info(
            "Creating temporary subtitle file",
            file=str(input_file),
            output=str(output_file),
            track_ids=list(track_ids),
        )
        logger.debug("Executing mkvmerge", command=cmd)

        tracker = ProgressTracker(on_progress)
        diagnostics: list[str] = []

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            logger.error("Failed to start mkvmerge", executable=self.mkvmerge, error=str(e))
            raise ExtractionError("Failed to start mkvmerge", details=str(e)) from e

        with process:
            for line in process.stdout:
                tracker.feed(line)
                if parse_progress_line(line) is None and line.strip():
                    diagnostics.append(line.rstrip())
            returncode = process.wait()

        if returncode > WARNING_RETURNCODE:
            logger.error(
                "mkvmerge failed",
                file=str(input_file),
                returncode=returncode,
                output=diagnostics[-20:],
            )
            self.cleanup_temp_file(output_file)
            raise ExtractionError(
                f"Error creating temporary subtitle file for {input_file.name}",
                details="\n".join(diagnostics),
                returncode=returncode,
            )

        if returncode == WARNING_RETURNCODE:
            logger.warning("mkvmerge completed with warnings", file=str(input_file), output=diagnostics)

        logger.info(
            "Temporary subtitle file created",
            output=str(output_file),
            elapsed=format_duration(tracker.elapsed),
        )
        return output_file

    def _run_extract(self, source: Path, jobs: Sequence[ExtractionJob]) -> None:
        cmd = self.build_extract_command(source, jobs)
        logger.debug("Executing mkvextract", source=str(source), command=cmd)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except OSError as e:
            logger.error("Failed to start mkvextract", executable=self.mkvextract, error=str(e))
            raise ExtractionError("Failed to start mkvextract", details=str(e)) from e
        except subprocess.TimeoutExpired as e:
            logger.error("mkvextract timeout", source=str(source), timeout=self.timeout_seconds)
            raise ExtractionError(f"Timed out extracting tracks from {source.name}") from e

        if result.returncode > WARNING_RETURNCODE:
            logger.error(
                "mkvextract failed",
                source=str(source),
                returncode=result.returncode,
                stderr=result.stderr,
            )
            raise ExtractionError(
                f"Error extracting subtitle tracks from {source.name}",
                details=(result.stdout or "") + (result.stderr or ""),
                returncode=result.returncode,
            )

        if result.returncode == WARNING_RETURNCODE:
            logger.warning("mkvextract completed with warnings", source=str(source), output=result.stdout)

    def extract_tracks(self, source: Path, jobs: Sequence[ExtractionJob]) -> None:
        """Extract all jobs of one source with a single mkvextract call.

        All-or-nothing: a failure fails every job in the call.

        Args:
            source: Container to extract from
            jobs: Jobs whose ``source`` equals ``source``

        Raises:
            ExtractionError: If mkvextract fails
        """
        if not jobs:
            return

        self._run_extract(source, jobs)

        for job in jobs:
            logger.info(
                "Extracted track",
                track_number=job.track.number,
                language=job.track.language,
                outputs=[str(path) for path in job.output_files],
            )

    def extract_track(self, job: ExtractionJob) -> None:
        """Extract a single job with its own mkvextract call.

        Raises:
            ExtractionError: If mkvextract fails
        """
        self._run_extract(job.source, [job])
        logger.info(
            "Extracted track",
            track_number=job.track.number,
            language=job.track.language,
            outputs=[str(path) for path in job.output_files],
        )

    def cleanup_temp_file(self, path: Optional[Path]) -> None:
        """Remove a temporary file, ignoring errors."""
        if path is None:
            return
        try:
            if path.exists():
                path.unlink()
                logger.debug("Cleaned up file", file=str(path))
        except OSError as e:
            logger.warning("Failed to cleanup file", file=str(path), error=str(e))
