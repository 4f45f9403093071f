"""Worker pool for concurrent batch processing."""

import asyncio
from pathlib import Path
from typing import Callable, Optional

from subscalpel.core.pipeline import ExtractionPipeline
from subscalpel.models.file import BatchSummary, FileState, OutputSpec, ProcessResult
from subscalpel.models.selection import TrackSelection
from subscalpel.models.track import ContainerInfo
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)

WORKER_CAP = 4


def calculate_worker_count(file_count: int, max_workers: int = WORKER_CAP) -> int:
    """Determine how many files to process concurrently.

    One worker per file for small batches, never more than WORKER_CAP
    (extraction is disk-bound) or the configured maximum.
    """
    if file_count <= 1:
        return 1
    return max(1, min(file_count, WORKER_CAP, max_workers))


class BatchProcessor:
    """Process many files with a bounded pool of workers."""

    def __init__(self, pipeline: ExtractionPipeline, max_workers: Optional[int] = None):
        """Initialize batch processor.

        Args:
            pipeline: Pipeline used for every file
            max_workers: Upper bound on concurrency (defaults to config)
        """
        self.pipeline = pipeline
        self.max_workers = max_workers or pipeline.config.processing.max_workers

    async def process(
        self,
        files: list[Path],
        selection: TrackSelection,
        output_spec: OutputSpec,
        dry_run: bool = False,
        infos: Optional[dict[Path, ContainerInfo]] = None,
        per_track: bool = False,
        on_result: Optional[Callable[[int, ProcessResult], None]] = None,
    ) -> BatchSummary:
        """Process files concurrently.

        A failing file never stops the batch; its result is recorded.

        Args:
            files: Input files
            selection: Selection applied to every file
            output_spec: Output settings applied to every file
            dry_run: Plan only
            infos: Track info already fetched, keyed by file path
            per_track: Extract each track with its own call
            on_result: Called with (index, result) as each file finishes

        Returns:
            BatchSummary with results in input order
        """
        infos = infos or {}
        worker_count = calculate_worker_count(len(files), self.max_workers)
        logger.info("Starting batch", file_count=len(files), worker_count=worker_count)

        queue: asyncio.Queue = asyncio.Queue()
        for index, file_path in enumerate(files):
            queue.put_nowait((index, file_path))

        results: list[Optional[ProcessResult]] = [None] * len(files)

        async def worker(worker_id: int) -> None:
            loop = asyncio.get_running_loop()
            while True:
                try:
                    index, file_path = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break

                logger.debug("Worker picked file", worker_id=worker_id, file=str(file_path))
                try:
                    result = await loop.run_in_executor(
                        None,
                        lambda: self.pipeline.process(
                            file_path,
                            selection,
                            output_spec,
                            dry_run=dry_run,
                            info=infos.get(file_path),
                            per_track=per_track,
                        ),
                    )
                except Exception as e:
                    logger.error(
                        "Worker error",
                        worker_id=worker_id,
                        file=str(file_path),
                        error=str(e),
                        exc_info=True,
                    )
                    result = ProcessResult(
                        state=FileState.FAILED, file_path=file_path, error=str(e)
                    )
                finally:
                    queue.task_done()

                results[index] = result
                if on_result is not None:
                    on_result(index, result)

        await asyncio.gather(*(worker(i) for i in range(worker_count)))

        summary = BatchSummary(results=[r for r in results if r is not None])
        logger.info(
            "Batch complete",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
        )
        return summary
