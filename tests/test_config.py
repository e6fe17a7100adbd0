"""Tests for hubsync/config.py - settings file and change watching."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from hubsync.config import Settings, SettingsWatcher, load_settings, save_settings, settings_path
from hubsync.exceptions import HubSyncError


class TestLoadSettings:
    """Tests for load_settings and save_settings."""

    def test_defaults_when_missing(self, tmp_dir: Path):
        assert load_settings(tmp_dir / "settings.json").refresh_interval == 30

    def test_round_trip(self, tmp_dir: Path):
        path = settings_path(tmp_dir / "nested")
        save_settings(path, Settings(refresh_interval=120))
        assert load_settings(path).refresh_interval == 120

    def test_invalid_json(self, tmp_dir: Path):
        path = tmp_dir / "settings.json"
        path.write_text("{")
        with pytest.raises(HubSyncError, match="Invalid JSON"):
            load_settings(path)

    def test_non_integer_interval(self, tmp_dir: Path):
        path = tmp_dir / "settings.json"
        path.write_text(json.dumps({"refresh_interval": "fast"}))
        with pytest.raises(HubSyncError, match="refresh_interval"):
            load_settings(path)

    def test_settings_path_uses_hubsync_home(self, tmp_dir: Path, monkeypatch):
        monkeypatch.setenv("HUBSYNC_HOME", str(tmp_dir))
        assert settings_path() == tmp_dir / "settings.json"


class TestSettingsWatcher:
    """Tests for SettingsWatcher."""

    def test_no_change(self, tmp_dir: Path):
        path = tmp_dir / "settings.json"
        save_settings(path, Settings(refresh_interval=30))
        assert SettingsWatcher(path).poll() is None

    def test_detects_change(self, tmp_dir: Path):
        """A rewritten file is reported once."""
        path = tmp_dir / "settings.json"
        save_settings(path, Settings(refresh_interval=30))
        watcher = SettingsWatcher(path)

        save_settings(path, Settings(refresh_interval=60))
        stat = path.stat()
        os.utime(path, (stat.st_atime, stat.st_mtime + 5))

        settings = watcher.poll()
        assert settings is not None
        assert settings.refresh_interval == 60
        assert watcher.poll() is None

    def test_file_created_later(self, tmp_dir: Path):
        path = tmp_dir / "settings.json"
        watcher = SettingsWatcher(path)
        save_settings(path, Settings(refresh_interval=45))
        assert watcher.poll().refresh_interval == 45

    def test_broken_file_ignored(self, tmp_dir: Path):
        """A half-written or invalid file is skipped, not raised."""
        path = tmp_dir / "settings.json"
        watcher = SettingsWatcher(path)
        path.write_text("{")
        assert watcher.poll() is None
