"""Unit tests for the batch worker pool."""

import threading
import time
from pathlib import Path
from unittest.mock import Mock

import pytest

from subscalpel.config import Config, ProcessingConfig
from subscalpel.core.worker_pool import BatchProcessor, calculate_worker_count
from subscalpel.models.file import FileState, OutputSpec, ProcessResult
from subscalpel.models.selection import TrackSelection


def make_pipeline(process, max_workers=4):
    """Build a pipeline mock with the given process function."""
    pipeline = Mock()
    pipeline.config = Config(processing=ProcessingConfig(max_workers=max_workers))
    pipeline.process.side_effect = process
    return pipeline


class TestCalculateWorkerCount:
    """Test calculate_worker_count function."""

    @pytest.mark.parametrize(
        "file_count,expected",
        [(0, 1), (1, 1), (2, 2), (3, 3), (4, 4), (10, 4), (100, 4)],
    )
    def test_worker_count(self, file_count, expected):
        """Test one worker per file, capped at four."""
        assert calculate_worker_count(file_count) == expected

    def test_respects_max_workers(self):
        """Test configured maximum lowers the count."""
        assert calculate_worker_count(10, max_workers=2) == 2
        assert calculate_worker_count(10, max_workers=16) == 4


class TestBatchProcessor:
    """Test BatchProcessor class."""

    @pytest.mark.asyncio
    async def test_results_in_input_order(self):
        """Test results follow input order even when finishing out of order."""
        files = [Path(f"ep{i}.mkv") for i in range(5)]

        def process(file_path, selection, output_spec, dry_run=False, info=None, per_track=False):
            # Earlier files finish last
            time.sleep(0.01 * (5 - int(file_path.stem[2:])))
            return ProcessResult(state=FileState.SUCCEEDED, file_path=file_path)

        processor = BatchProcessor(make_pipeline(process))
        summary = await processor.process(files, TrackSelection(), OutputSpec())

        assert [r.file_path for r in summary.results] == files
        assert summary.total == 5
        assert summary.succeeded == 5
        assert summary.failed == 0

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_batch(self):
        """Test one failing file doesn't affect the others."""
        files = [Path("a.mkv"), Path("b.mkv"), Path("c.mkv")]

        def process(file_path, selection, output_spec, dry_run=False, info=None, per_track=False):
            if file_path.name == "a.mkv":
                raise RuntimeError("unexpected")
            if file_path.name == "b.mkv":
                return ProcessResult(
                    state=FileState.FAILED, file_path=file_path, error="mkvextract failed"
                )
            return ProcessResult(state=FileState.SUCCEEDED, file_path=file_path)

        processor = BatchProcessor(make_pipeline(process))
        summary = await processor.process(files, TrackSelection(), OutputSpec())

        assert [r.state for r in summary.results] == [
            FileState.FAILED,
            FileState.FAILED,
            FileState.SUCCEEDED,
        ]
        assert summary.results[0].error == "unexpected"
        assert summary.failed == 2
        assert summary.succeeded == 1

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        """Test no more than max_workers files run at once."""
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        def process(file_path, selection, output_spec, dry_run=False, info=None, per_track=False):
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.02)
            with lock:
                state["running"] -= 1
            return ProcessResult(state=FileState.SUCCEEDED, file_path=file_path)

        files = [Path(f"{i}.mkv") for i in range(8)]
        processor = BatchProcessor(make_pipeline(process), max_workers=2)
        await processor.process(files, TrackSelection(), OutputSpec())

        assert state["peak"] <= 2

    @pytest.mark.asyncio
    async def test_passes_options_and_track_info(self):
        """Test dry run flag and pre-fetched info reach the pipeline."""
        info = Mock()
        pipeline = make_pipeline(
            lambda file_path, *args, **kwargs: ProcessResult(
                state=FileState.DRY_RUN, file_path=file_path
            )
        )
        selection, output_spec = TrackSelection(), OutputSpec()

        processor = BatchProcessor(pipeline)
        await processor.process(
            [Path("a.mkv")], selection, output_spec, dry_run=True, infos={Path("a.mkv"): info}
        )

        pipeline.process.assert_called_once_with(
            Path("a.mkv"), selection, output_spec, dry_run=True, info=info, per_track=False
        )

    @pytest.mark.asyncio
    async def test_per_track_reaches_pipeline(self):
        """Test per-track extraction is forwarded for every file."""
        pipeline = make_pipeline(
            lambda file_path, *args, **kwargs: ProcessResult(
                state=FileState.SUCCEEDED, file_path=file_path
            )
        )

        processor = BatchProcessor(pipeline)
        await processor.process(
            [Path("a.mkv"), Path("b.mkv")], TrackSelection(), OutputSpec(), per_track=True
        )

        assert pipeline.process.call_count == 2
        for call in pipeline.process.call_args_list:
            assert call.kwargs["per_track"] is True

    @pytest.mark.asyncio
    async def test_on_result_callback(self):
        """Test the callback receives every result with its index."""
        files = [Path("a.mkv"), Path("b.mkv")]
        seen = {}

        processor = BatchProcessor(
            make_pipeline(
                lambda file_path, *args, **kwargs: ProcessResult(
                    state=FileState.SUCCEEDED, file_path=file_path
                )
            )
        )
        await processor.process(
            files,
            TrackSelection(),
            OutputSpec(),
            on_result=lambda index, result: seen.update({index: result.file_path}),
        )

        assert seen == {0: Path("a.mkv"), 1: Path("b.mkv")}

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        """Test an empty file list."""
        processor = BatchProcessor(make_pipeline(Mock()))
        summary = await processor.process([], TrackSelection(), OutputSpec())
        assert summary.total == 0
