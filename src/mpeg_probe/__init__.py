"""Read-only metadata extraction for MP3 files."""

__version__ = "0.1.0"
