"""Output filename templating and directory resolution.

Templates use bracketed placeholders:

    {basename}   input filename without extension
    {language}   track language code as stored
    {trackno}    track number, zero-padded to 3 digits
    {trackname}  sanitized track name, empty if absent
    {forced}     'forced' if the forced flag is set, else empty
    {default}    'default' if the default flag is set, else empty
    {extension}  subtitle file extension for the codec

Unknown placeholders are left as literal text. After substitution the name
is split on dots and empty segments are dropped, so empty placeholders do
not leave '..' behind.
"""

import re
from pathlib import Path

from subscalpel.models.file import DEFAULT_OUTPUT_TEMPLATE, OutputSpec
from subscalpel.models.track import Track
from subscalpel.utils.formats import VOBSUB_CODEC, VOBSUB_PAYLOAD_EXTENSION, extension_for_codec
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{[a-z]+\}")

_TRACKNAME_REPLACE = str.maketrans({"/": "-", "\\": "-", ":": "-", "|": "-"})
_TRACKNAME_STRIP = str.maketrans("", "", '*?"<>')


def sanitize_track_name(name: str | None) -> str:
    """Make a track name safe for use inside a filename."""
    if not name:
        return ""
    cleaned = name.translate(_TRACKNAME_REPLACE).translate(_TRACKNAME_STRIP)
    return cleaned.strip(" .")


def cleanup_filename(filename: str) -> str:
    """Drop empty dot-separated segments ('a..b.' becomes 'a.b')."""
    return ".".join(part for part in filename.split(".") if part)


def placeholder_values(basename: str, track: Track) -> dict[str, str]:
    """Compute the substitution value for every recognized placeholder."""
    extension = extension_for_codec(track.codec_id)
    if track.codec_id == VOBSUB_CODEC:
        # mkvextract writes the .idx next to the .sub automatically
        extension = VOBSUB_PAYLOAD_EXTENSION

    return {
        "{basename}": basename,
        "{language}": track.language or "",
        "{trackno}": f"{track.number:03d}",
        "{trackname}": sanitize_track_name(track.track_name),
        "{forced}": "forced" if track.forced else "",
        "{default}": "default" if track.default else "",
        "{extension}": extension,
    }


def render_filename(input_file: str | Path, track: Track, template: str | None = None) -> str:
    """Render the output filename for a track.

    Args:
        input_file: Input file path or name; only its stem is used
        track: Track as reported for the original input file
        template: Filename template (defaults to DEFAULT_OUTPUT_TEMPLATE)

    Returns:
        Rendered, cleaned-up filename (never empty)
    """
    if not template:
        template = DEFAULT_OUTPUT_TEMPLATE

    basename = Path(input_file).stem
    values = placeholder_values(basename, track)

    # Single pass so substituted text is never scanned for placeholders again
    rendered = _PLACEHOLDER.sub(lambda m: values.get(m.group(0), m.group(0)), template)
    filename = cleanup_filename(rendered)

    if not filename and template != DEFAULT_OUTPUT_TEMPLATE:
        logger.warning(
            "Template rendered an empty filename, using default template",
            template=template,
            track_number=track.number,
        )
        return render_filename(input_file, track, DEFAULT_OUTPUT_TEMPLATE)

    return filename


def resolve_output_directory(input_file: Path, output_spec: OutputSpec) -> Path:
    """Resolve the target directory for an input file without creating it."""
    if output_spec.is_deferred:
        return input_file.parent / f"{input_file.stem}-subtitles"
    if output_spec.output_directory:
        return Path(output_spec.output_directory)
    return input_file.parent


def ensure_output_directory(input_file: Path, output_spec: OutputSpec) -> Path:
    """Resolve the target directory and create it if needed.

    Creation failure is not fatal: the input file's own directory is used
    instead and a warning is logged.

    Args:
        input_file: Input MKV path
        output_spec: Output settings

    Returns:
        Directory extracted files should be written to
    """
    directory = resolve_output_directory(input_file, output_spec)
    if directory == input_file.parent:
        return directory

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(
            "Could not create output directory, using input file directory",
            directory=str(directory),
            fallback=str(input_file.parent),
            error=str(e),
        )
        return input_file.parent

    return directory


def resolve_output_path(input_file: Path, track: Track, output_spec: OutputSpec) -> Path:
    """Compute the full destination path for a track, creating its directory."""
    directory = ensure_output_directory(input_file, output_spec)
    return directory / render_filename(input_file, track, output_spec.template)
