"""File discovery and input validation for MKV files."""

import glob
from pathlib import Path
from typing import List

from subscalpel.exceptions import InputValidationError
from subscalpel.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = {".mkv", ".mks"}


def is_mkv_file(path: str | Path) -> bool:
    """Check the file extension (case-insensitive) for .mkv or .mks."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def validate_input_file(path: Path) -> None:
    """Validate that a path is an existing MKV file.

    Raises:
        InputValidationError: If missing, a directory, or not .mkv/.mks
    """
    if not path.exists():
        raise InputValidationError(path, "File does not exist")
    if path.is_dir():
        raise InputValidationError(path, "Path is a directory")
    if not is_mkv_file(path):
        raise InputValidationError(path, "File is not an MKV file")


class FileScanner:
    """Scan directories and glob patterns for MKV files."""

    def scan(self, path: Path, recursive: bool = False) -> List[Path]:
        """Scan a path for MKV files.

        Args:
            path: Path to scan (file or directory)
            recursive: If True, scan subdirectories recursively

        Returns:
            List of MKV file paths, sorted by path

        Raises:
            FileNotFoundError: If path doesn't exist
        """
        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")

        if path.is_file():
            if is_mkv_file(path):
                logger.debug("Single file matched", file=str(path))
                return [path]
            logger.warning(
                "File extension not supported",
                file=str(path),
                extension=path.suffix,
                supported=sorted(SUPPORTED_EXTENSIONS),
            )
            return []

        files = []
        for ext in SUPPORTED_EXTENSIONS:
            pattern = f"**/*{ext}" if recursive else f"*{ext}"
            found = [p for p in path.glob(pattern) if p.is_file()]
            files.extend(found)
            logger.debug(
                "Directory scan pattern",
                directory=str(path),
                pattern=pattern,
                found_count=len(found),
            )

        # Case-insensitive extensions are not covered by the glob patterns above
        files.extend(
            p
            for p in (path.rglob("*") if recursive else path.iterdir())
            if p.is_file() and is_mkv_file(p) and p.suffix not in SUPPORTED_EXTENSIONS
        )

        files = sorted(set(files))
        logger.info(
            "Directory scan complete",
            directory=str(path),
            recursive=recursive,
            total_files=len(files),
        )
        return files

    def scan_pattern(self, pattern: str) -> List[Path]:
        """Scan using a glob pattern or a directory path.

        Args:
            pattern: Glob pattern (e.g., "Season 1/*.mkv", "/media/**/*.mkv")

        Returns:
            Sorted list of existing MKV files matching the pattern

        Example:
            scanner.scan_pattern("*.mkv")
            scanner.scan_pattern("/media/anime/**/*.mkv")
        """
        if not glob.has_magic(pattern):
            path = Path(pattern)
            if path.is_dir():
                return self.scan(path)
            return [path] if path.is_file() and is_mkv_file(path) else []

        matches = [Path(p) for p in glob.glob(pattern, recursive=True)]
        files = sorted(p for p in matches if p.is_file() and is_mkv_file(p))

        logger.info(
            "Pattern scan complete",
            pattern=pattern,
            matched=len(matches),
            total_files=len(files),
        )
        return files
