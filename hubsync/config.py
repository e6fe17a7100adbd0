"""User settings stored next to the instance list."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from .constants import DEFAULT_REFRESH_INTERVAL_S, SETTINGS_FILE_NAME
from .exceptions import HubSyncError
from .utils import default_data_dir, ensure_parent_dir

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL_S


def settings_path(data_dir: Path | None = None) -> Path:
    return (data_dir or default_data_dir()) / SETTINGS_FILE_NAME


def load_settings(path: Path) -> Settings:
    """Load settings, falling back to defaults when the file is absent.

    Raises:
        HubSyncError: File exists but is not a JSON object with valid values
    """
    if not path.exists():
        return Settings()
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise HubSyncError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise HubSyncError(f"Expected a JSON object in {path}")

    interval = data.get("refresh_interval", DEFAULT_REFRESH_INTERVAL_S)
    if not isinstance(interval, int) or isinstance(interval, bool):
        raise HubSyncError(f"refresh_interval in {path} must be an integer number of seconds")
    return Settings(refresh_interval=interval)


def save_settings(path: Path, settings: Settings) -> None:
    ensure_parent_dir(path)
    path.write_text(json.dumps(asdict(settings), indent=2) + "\n", encoding="utf-8")


class SettingsWatcher:
    """Notices edits to the settings file by polling its mtime."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._mtime = self._current_mtime()

    def _current_mtime(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return None

    def poll(self) -> Settings | None:
        """Return the new settings if the file changed since the last poll."""
        mtime = self._current_mtime()
        if mtime == self._mtime:
            return None
        self._mtime = mtime
        try:
            return load_settings(self.path)
        except HubSyncError as e:
            logger.warning("Ignoring settings change: %s", e)
            return None
