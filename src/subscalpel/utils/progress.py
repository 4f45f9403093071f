"""Progress parsing for mkvmerge GUI-mode output."""

import time
from typing import Callable, Optional

PROGRESS_PREFIX = "#GUI#progress "


def parse_progress_line(line: str) -> Optional[int]:
    """Extract a percentage from an mkvmerge --gui-mode output line.

    Progress lines look like ``#GUI#progress 45%``. Any other line,
    including malformed progress lines, yields None.

    Args:
        line: One line of mkvmerge stdout

    Returns:
        Percentage as int, or None if the line is not a progress line
    """
    line = line.rstrip("\r\n")
    if not (line.startswith(PROGRESS_PREFIX) and line.endswith("%")):
        return None

    value = line[len(PROGRESS_PREFIX) : -1].strip()
    try:
        return int(value)
    except ValueError:
        return None


class ProgressTracker:
    """Forward increasing progress percentages to a display callback.

    Nothing is shown until the first non-zero percentage, and a
    percentage is only forwarded when it is higher than the last one.
    """

    def __init__(self, on_update: Optional[Callable[[int], None]] = None):
        self.on_update = on_update
        self.started = False
        self.last_percent = 0
        self.start_time: Optional[float] = None

    def feed(self, line: str) -> Optional[int]:
        """Process one output line.

        Returns:
            The forwarded percentage, or None if nothing was forwarded
        """
        percentage = parse_progress_line(line)
        if percentage is None:
            return None

        if not self.started:
            if percentage <= 0:
                return None
            self.started = True
            self.start_time = time.monotonic()

        if percentage <= self.last_percent:
            return None

        self.last_percent = percentage
        if self.on_update is not None:
            self.on_update(percentage)
        return percentage

    @property
    def elapsed(self) -> float:
        """Seconds since the first forwarded percentage."""
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time


def format_duration(seconds: float) -> str:
    """Format a duration as '850ms', '42s', '3m 5s' or '1h 2m 3s'."""
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
