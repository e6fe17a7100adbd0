"""set-interval command."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from ..config import load_settings, save_settings, settings_path
from ..scheduler import clamp_interval
from .common import resolve_data_dir

if TYPE_CHECKING:
    from ..cli_types import SetIntervalArgs


def cmd_set_interval(args: SetIntervalArgs) -> None:
    """Persist the refresh interval; running watchers pick it up."""
    path = settings_path(resolve_data_dir(args.data_dir))
    settings = load_settings(path)
    settings.refresh_interval = clamp_interval(args.seconds)
    save_settings(path, settings)
    if settings.refresh_interval != args.seconds:
        click.echo(f"Interval clamped to {settings.refresh_interval}s")
    click.echo(f"Refresh interval set to {settings.refresh_interval}s")
