"""One-shot status command."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

import click

from ..exceptions import CommandFailureError
from ..formatting import render_snapshot_lines
from ..utils import format_elapsed_time
from .common import open_manager, pick_hub

if TYPE_CHECKING:
    from ..cli_types import StatusArgs

logger = logging.getLogger(__name__)


def cmd_status(args: StatusArgs) -> None:
    """Run one refresh cycle against a hub and print the snapshot."""
    manager = open_manager(args.data_dir, with_engine=True)
    orchestrator = manager.orchestrator
    assert orchestrator is not None
    try:
        instance = pick_hub(manager, args.hub)
        start = time.monotonic()
        orchestrator.select_instance(instance)
        if not orchestrator.join(timeout=args.timeout):
            click.echo(
                f"ERROR: Timed out after {args.timeout}s waiting for {instance.name}", err=True
            )
            raise CommandFailureError(rc=1)

        snapshot = orchestrator.snapshot
        error = orchestrator.last_error
        if args.json:
            payload = {"hub": instance.to_dict(), "error": error, "snapshot": snapshot.to_dict()}
            click.echo(json.dumps(payload, indent=2, sort_keys=True))
        else:
            for line in render_snapshot_lines(snapshot, hub_name=instance.name, error=error):
                click.echo(line)
            elapsed = format_elapsed_time(time.monotonic() - start)
            logger.debug("Refreshed %s in %s", instance.name, elapsed)
        if error:
            raise CommandFailureError(rc=1)
    finally:
        manager.close()
