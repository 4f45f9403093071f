"""SubScalpel - extract subtitle tracks from MKV files."""

__version__ = "1.0.0"
