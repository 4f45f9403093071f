"""Command-line interface for SubScalpel."""

import asyncio
import sys
from contextlib import contextmanager
from pathlib import Path

import click

from subscalpel import __version__
from subscalpel.config import load_config
from subscalpel.core.parser import build_selection, parse_exclusion, parse_selection, split_tokens
from subscalpel.core.pipeline import ExtractionPipeline
from subscalpel.core.scanner import FileScanner
from subscalpel.core.worker_pool import BatchProcessor
from subscalpel.exceptions import InvalidSelectionError, SubscalpelError
from subscalpel.models.file import (
    DEFAULT_OUTPUT_TEMPLATE,
    DEFERRED_OUTPUT_DIR,
    FileState,
    OutputSpec,
)
from subscalpel.models.selection import TrackSelection
from subscalpel.utils.formats import codec_label
from subscalpel.utils.language import display_name
from subscalpel.utils.logger import get_logger, setup_logging


def _plural(count, word):
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def output_options(func):
    """Options shared by every command that writes subtitle files."""
    func = click.option(
        "--format",
        "-f",
        "template",
        default=None,
        help=f"Filename template (default: {DEFAULT_OUTPUT_TEMPLATE})",
    )(func)
    func = click.option(
        "--output-dir",
        "-o",
        is_flag=False,
        flag_value=DEFERRED_OUTPUT_DIR,
        default=None,
        help="Output directory; without a value uses {inputdir}/{basename}-subtitles",
    )(func)
    return func


def selection_options(func):
    """Options shared by extract and batch."""
    func = click.option(
        "--strict",
        is_flag=True,
        help="Check track numbers against the input and fail on any invalid token",
    )(func)
    func = click.option(
        "--dry-run", "-d", is_flag=True, help="Show what would be extracted without extracting"
    )(func)
    func = output_options(func)
    func = click.option(
        "--exclude", "-e", default=None, help="Exclusion expression (e.g., 'chi,sup')"
    )(func)
    func = click.option(
        "--select", "-s", default=None, help="Selection expression (e.g., 'eng,14,srt')"
    )(func)
    return func


def _resolve_settings(ctx, select, exclude, output_dir, template):
    """Merge command-line values over the applied configuration."""
    merged = ctx.obj["applied"].merge_with_cli(
        languages=split_tokens(select) or None,
        exclusions=split_tokens(exclude) or None,
        output_template=template,
        output_dir=output_dir,
    )
    output_spec = OutputSpec(
        output_directory=merged.output_dir,
        template=merged.output_template or DEFAULT_OUTPUT_TEMPLATE,
    )
    return ",".join(merged.languages), ",".join(merged.exclusions), output_spec


def _warn_invalid(kind, token):
    click.secho(
        f"⚠ Unknown {kind} language code, format, or invalid track ID '{token}' - skipping",
        fg="yellow",
        err=True,
    )


def _fail(message, details=None):
    click.secho(f"✗ {message}", fg="red", err=True)
    if details:
        click.echo(details.rstrip(), err=True)
    sys.exit(1)


@contextmanager
def _mux_progress(enabled):
    """Yield a progress callback drawing a bar, or None when disabled."""
    if not enabled:
        yield None
        return

    with click.progressbar(length=100, label="Creating temporary subtitle file") as bar:

        def update(percent):
            bar.update(percent - bar.pos)

        yield update


def _print_tracks(info):
    """Print subtitle tracks with a summary line."""
    tracks = info.subtitle_tracks
    click.echo(f"Subtitle tracks in {info.path.name}:")
    for track in tracks:
        language = track.language or "und"
        line = f"  {track.number:>3}  {language} ({display_name(language)})"
        if track.track_name:
            line += f" - {track.track_name}"
        line += f" [{codec_label(track.codec_id)}]"
        if track.forced:
            line += " [FORCED]"
        if track.default:
            line += " [DEFAULT]"
        click.echo(line)

    languages = {track.language for track in tracks}
    formats = {track.codec_id for track in tracks}
    click.echo("")
    click.echo(
        f"{_plural(len(tracks), 'total track')}, "
        f"{_plural(len(languages), 'language')}, "
        f"{_plural(len(formats), 'format')}"
    )


def _print_result(result, indent=""):
    """Print one file's result with its output files."""
    if result.state == FileState.SUCCEEDED:
        click.secho(f"{indent}✓ {result}", fg="green")
        for path in result.output_files:
            click.echo(f"{indent}  → {path}")
    elif result.state == FileState.DRY_RUN:
        click.secho(f"{indent}⊙ {result}", fg="cyan")
        for job in result.jobs:
            click.echo(f"{indent}  ▪ {job.track} [{codec_label(job.track.codec_id)}]")
            for path in job.output_files:
                click.echo(f"{indent}    → {path}")
    elif result.state == FileState.ABORTED_EMPTY:
        click.secho(f"{indent}⊘ {result}", fg="yellow")
    else:
        click.secho(f"{indent}✗ {result}", fg="red", err=True)
        for failure in result.failures:
            click.secho(
                f"{indent}  ✗ Track {failure.job.track.number}: {failure.error}",
                fg="red",
                err=True,
            )
        if result.details:
            click.echo(result.details.rstrip(), err=True)


def _print_summary(summary):
    click.echo("")
    click.echo("=" * 60)
    click.echo("Summary:")
    click.secho(f"  ✓ Succeeded: {summary.succeeded}", fg="green")
    click.secho(f"  ✗ Failed:    {summary.failed}", fg="red")
    click.echo(f"  Total:       {summary.total}")


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.option("--profile", "-p", default=None, help="Configuration profile to apply")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, config, profile, verbose):
    """SubScalpel - Extract subtitle tracks from MKV files."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(config)
        setup_logging(cfg.logging, verbose=verbose)

        applied = cfg.apply_profile(profile) if profile else cfg.apply_defaults()
    except SubscalpelError as e:
        _fail(f"Error loading configuration: {e.message}", e.details)

    ctx.obj["config"] = cfg
    ctx.obj["applied"] = applied


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@selection_options
@click.pass_context
def extract(ctx, file, select, exclude, output_dir, template, dry_run, strict):
    """Extract subtitle tracks from a single MKV file.

    Args:
        file: Path to the MKV file
    """
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    select, exclude, output_spec = _resolve_settings(ctx, select, exclude, output_dir, template)
    pipeline = ExtractionPipeline(config)

    try:
        info = pipeline.analyze(file)
        selection = build_selection(
            select,
            exclude,
            available_tracks=info.subtitle_track_numbers if strict else None,
            strict=strict,
            on_invalid=_warn_invalid,
        )
    except InvalidSelectionError as e:
        _fail(e.message)
    except SubscalpelError as e:
        _fail(e.message, e.details)

    logger.debug("Resolved selection", file=str(file), selection=selection.describe())
    click.echo(f"Processing: {file}")
    click.echo(selection.describe())

    with _mux_progress(config.processing.remux_first and not dry_run) as on_progress:
        result = pipeline.process(
            file,
            selection,
            output_spec,
            dry_run=dry_run,
            info=info,
            on_progress=on_progress,
        )

    _print_result(result)
    sys.exit(0 if result.ok else 1)


@cli.command()
@click.argument("pattern")
@selection_options
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum files processed concurrently (capped at 4)",
)
@click.pass_context
def batch(ctx, pattern, select, exclude, output_dir, template, dry_run, strict, workers):
    """Extract subtitle tracks from every MKV file matching a pattern.

    Args:
        pattern: Glob pattern (e.g., 'Season 1/*.mkv') or directory
    """
    config = ctx.obj["config"]

    select, exclude, output_spec = _resolve_settings(ctx, select, exclude, output_dir, template)
    pipeline = ExtractionPipeline(config)

    files = FileScanner().scan_pattern(pattern)
    if not files:
        _fail(f"No MKV files found matching: {pattern}")

    click.echo(f"Found {len(files)} file(s)")

    infos = {}
    available = None
    if strict:
        available = set()
        for file in files:
            try:
                infos[file] = pipeline.analyze(file)
            except SubscalpelError:
                continue
            available.update(infos[file].subtitle_track_numbers)

    try:
        selection = build_selection(
            select,
            exclude,
            available_tracks=available,
            strict=strict,
            on_invalid=_warn_invalid,
        )
    except InvalidSelectionError as e:
        _fail(e.message)

    click.echo(selection.describe())
    click.echo("")

    def on_result(index, result):
        click.echo(f"[{index + 1}/{len(files)}] {result.file_path.name}")
        _print_result(result, indent="  ")

    processor = BatchProcessor(pipeline, max_workers=workers)
    summary = asyncio.run(
        processor.process(
            files,
            selection,
            output_spec,
            dry_run=dry_run,
            infos=infos,
            on_result=on_result,
        )
    )

    _print_summary(summary)

    if summary.failed > 0:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(path_type=Path))
@click.pass_context
def info(ctx, file):
    """List the subtitle tracks of an MKV file.

    Args:
        file: Path to the MKV file
    """
    pipeline = ExtractionPipeline(ctx.obj["config"])

    try:
        container = pipeline.analyze(file)
    except SubscalpelError as e:
        _fail(e.message, e.details)

    _print_tracks(container)


def _prompt_filter(label, parse, available):
    """Prompt until the expression contains no invalid tokens."""
    while True:
        raw = click.prompt(label, default="", show_default=False)
        track_filter, invalid = parse(raw, available)
        if not invalid:
            return track_filter
        for token in invalid:
            click.secho(f"⚠ Invalid token '{token}', please try again", fg="yellow")


def _discover(paths):
    """Expand files and directories into a de-duplicated file list."""
    scanner = FileScanner()
    files = []
    for path in paths:
        try:
            found = scanner.scan(path)
        except FileNotFoundError as e:
            _fail(str(e))
        files.extend(f for f in found if f not in files)
    return files


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@output_options
@click.pass_context
def interactive(ctx, paths, output_dir, template):
    """Choose subtitle tracks to extract interactively.

    Several files or directories can be given at once; one selection
    is then applied to every file.

    Args:
        paths: MKV files or directories containing them
    """
    config = ctx.obj["config"]

    _, _, output_spec = _resolve_settings(ctx, None, None, output_dir, template)
    pipeline = ExtractionPipeline(config)

    files = _discover(paths)
    if not files:
        _fail("No MKV files found")

    infos = {}
    for file in files:
        try:
            infos[file] = pipeline.analyze(file)
        except SubscalpelError as e:
            if len(files) == 1:
                _fail(e.message, e.details)
            click.secho(f"✗ {file.name}: {e.message}", fg="red", err=True)
            continue
        _print_tracks(infos[file])
        click.echo("")

    if not infos:
        _fail("No readable MKV files found")

    available = sorted(
        {number for container in infos.values() for number in container.subtitle_track_numbers}
    )
    if not available:
        click.secho("⊘ No subtitle tracks found", fg="yellow")
        sys.exit(0)

    if click.confirm("Extract all tracks?", default=True):
        selection = TrackSelection()
    else:
        click.echo("Enter languages, track numbers or formats separated by commas.")
        include = _prompt_filter("Tracks to extract", parse_selection, available)
        excluded = _prompt_filter("Tracks to exclude", parse_exclusion, available)
        selection = TrackSelection.from_filters(include, excluded)

    click.echo(selection.describe())

    if len(infos) == 1:
        ((file, container),) = infos.items()
        with _mux_progress(config.processing.remux_first) as on_progress:
            result = pipeline.process(
                file,
                selection,
                output_spec,
                info=container,
                per_track=True,
                on_progress=on_progress,
            )
        _print_result(result)
        sys.exit(0 if result.ok else 1)

    readable = list(infos)

    def on_result(index, result):
        click.echo(f"[{index + 1}/{len(readable)}] {result.file_path.name}")
        _print_result(result, indent="  ")

    processor = BatchProcessor(pipeline)
    summary = asyncio.run(
        processor.process(
            readable,
            selection,
            output_spec,
            infos=infos,
            per_track=True,
            on_result=on_result,
        )
    )

    _print_summary(summary)
    if summary.failed > 0 or len(readable) < len(files):
        sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"SubScalpel v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
