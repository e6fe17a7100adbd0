"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class HubAddArgs:
    """Arguments for hub-add command."""

    name: str
    url: str
    email: str
    credential: str
    data_dir: str | None
    no_verify: bool


@dataclass
class HubEditArgs:
    """Arguments for hub-edit command."""

    hub: str
    name: str | None
    url: str | None
    email: str | None
    credential: str | None
    data_dir: str | None
    no_verify: bool


@dataclass
class HubRefArgs:
    """Arguments for commands naming a single hub (hub-remove, hub-select)."""

    hub: str
    data_dir: str | None


@dataclass
class HubListArgs:
    """Arguments for hub-list command."""

    data_dir: str | None
    json: bool


@dataclass
class StatusArgs:
    """Arguments for status command."""

    hub: str | None
    data_dir: str | None
    json: bool
    timeout: int


@dataclass
class WatchArgs:
    """Arguments for watch command."""

    hub: str | None
    data_dir: str | None
    interval: int | None
    json: bool


@dataclass
class SetIntervalArgs:
    """Arguments for set-interval command."""

    seconds: int
    data_dir: str | None
