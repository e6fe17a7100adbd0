"""hubsync utility functions."""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from urllib.parse import urlparse

from .constants import DATA_DIR_NAME
from .exceptions import BadURLError


def utc_now_iso() -> str:
    """Return current UTC time in ISO format without microseconds."""
    return dt.datetime.now(dt.UTC).replace(microsecond=0).isoformat()


def clamp(value: int, lower: int, upper: int) -> int:
    """Clamp value into the closed range [lower, upper]."""
    return min(max(value, lower), upper)


def format_elapsed_time(seconds: float) -> str:
    """Format elapsed time in human-readable format.

    Args:
        seconds: Elapsed time in seconds

    Returns:
        Formatted string like "1m25s", "45s", or "1h05m30s"
    """
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def ensure_parent_dir(p: Path) -> None:
    """Create parent directory of path if it doesn't exist."""
    p.parent.mkdir(parents=True, exist_ok=True)


def default_data_dir() -> Path:
    """Return the hubsync data directory (HUBSYNC_HOME or ~/.hubsync)."""
    override = os.environ.get("HUBSYNC_HOME")
    if override:
        return Path(override).expanduser()
    return Path(os.path.expanduser("~")) / DATA_DIR_NAME


def clean_base_url(url: str) -> str:
    """Normalize a user-entered hub address.

    Strips surrounding whitespace and trailing slashes so API paths can be
    appended directly.
    """
    return url.strip().rstrip("/")


def validate_base_url(url: str) -> str:
    """Return url if it is an absolute http(s) URL, else raise BadURLError."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise BadURLError(f"Invalid hub URL: {url!r}")
    return url
