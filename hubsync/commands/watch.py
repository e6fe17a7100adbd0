"""Continuous watch command driven by PollScheduler."""

from __future__ import annotations

import json
import logging
import threading
from typing import TYPE_CHECKING

import click

from ..config import SettingsWatcher, load_settings, settings_path
from ..constants import SETTINGS_POLL_S
from ..formatting import render_snapshot_lines
from ..scheduler import PollScheduler
from ..utils import utc_now_iso
from .common import open_manager, pick_hub, resolve_data_dir

if TYPE_CHECKING:
    from ..cli_types import WatchArgs
    from ..models import Snapshot

logger = logging.getLogger(__name__)


def cmd_watch(args: WatchArgs, *, stop_event: threading.Event | None = None) -> None:
    """Poll a hub until interrupted, printing every new snapshot.

    Without --interval the refresh interval comes from settings.json, and
    edits to that file (e.g. via set-interval) retune the running scheduler.
    """
    manager = open_manager(args.data_dir, with_engine=True)
    orchestrator = manager.orchestrator
    assert orchestrator is not None
    stop = stop_event or threading.Event()
    path = settings_path(resolve_data_dir(args.data_dir))
    watcher = SettingsWatcher(path) if args.interval is None else None
    interval = args.interval if args.interval is not None else load_settings(path).refresh_interval

    try:
        instance = pick_hub(manager, args.hub)
        printed: dict[str, object] = {"version": -1, "error": None}
        print_lock = threading.Lock()

        def show(snapshot: Snapshot) -> None:
            # systems drive the display; skip partial snapshots while loading
            if orchestrator.is_loading:
                return
            error = orchestrator.last_error
            with print_lock:
                if snapshot.version <= printed["version"] and error == printed["error"]:
                    return
                printed["version"] = snapshot.version
                printed["error"] = error
                if args.json:
                    payload = {"ts": utc_now_iso(), "error": error, "snapshot": snapshot.to_dict()}
                    click.echo(json.dumps(payload, sort_keys=True))
                    return
                click.echo(f"--- {utc_now_iso()}")
                for line in render_snapshot_lines(snapshot, hub_name=instance.name, error=error):
                    click.echo(line)

        unsubscribe = orchestrator.subscribe(show)
        scheduler = PollScheduler(orchestrator.refresh_all)
        orchestrator.select_instance(instance)
        scheduler.start(interval)
        click.echo(
            f"Watching {instance.name} every {scheduler.interval}s (Ctrl-C to stop)", err=True
        )
        try:
            while not stop.wait(SETTINGS_POLL_S):
                if watcher is None:
                    continue
                settings = watcher.poll()
                if settings is not None:
                    logger.debug("Refresh interval changed to %ss", settings.refresh_interval)
                    scheduler.interval_changed(settings.refresh_interval)
        finally:
            scheduler.stop()
            unsubscribe()
    finally:
        manager.close()
