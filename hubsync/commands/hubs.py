"""Hub configuration commands: add, edit, remove, list, select."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

import click

from ..exceptions import HubSyncError, UserError
from ..models import Instance
from ..utils import clean_base_url, validate_base_url
from .common import open_manager, require_hub

if TYPE_CHECKING:
    from ..cli_types import HubAddArgs, HubEditArgs, HubListArgs, HubRefArgs
    from ..hubs import HubManager

logger = logging.getLogger(__name__)


def _verify_or_fail(manager: HubManager, instance: Instance) -> int:
    try:
        return manager.verify(instance)
    except HubSyncError as e:
        raise UserError(f"Connection failed: {e}", rc=1) from e


def cmd_hub_add(args: HubAddArgs) -> None:
    """Verify a new hub's credentials, then save it."""
    url = validate_base_url(clean_base_url(args.url))
    manager = open_manager(args.data_dir)
    if manager.find(args.name) is not None:
        raise UserError(f"A hub named {args.name!r} already exists")

    instance = Instance.create(
        name=args.name, url=url, email=args.email, credential=args.credential
    )
    if not args.no_verify:
        count = _verify_or_fail(manager, instance)
        click.echo(f"Connected to {url} ({count} system(s))")

    stored = manager.add_instance(instance)
    click.echo(f"Added hub {stored.name} ({stored.id})")


def cmd_hub_edit(args: HubEditArgs) -> None:
    """Change a hub's name, URL, email or credential."""
    manager = open_manager(args.data_dir)
    existing = require_hub(manager, args.hub)

    updated = replace(
        existing,
        name=args.name or existing.name,
        url=validate_base_url(clean_base_url(args.url)) if args.url else existing.url,
        email=args.email or existing.email,
        credential=args.credential or "",
    )
    if not args.no_verify:
        trial = updated if args.credential else manager.with_credential(updated)
        _verify_or_fail(manager, trial)

    stored = manager.update_instance(updated)
    click.echo(f"Updated hub {stored.name}")


def cmd_hub_remove(args: HubRefArgs) -> None:
    manager = open_manager(args.data_dir)
    instance = require_hub(manager, args.hub)
    manager.remove_instance(instance)
    click.echo(f"Removed hub {instance.name}")
    if manager.selected is not None:
        click.echo(f"Selected hub is now {manager.selected.name}")


def cmd_hub_select(args: HubRefArgs) -> None:
    manager = open_manager(args.data_dir)
    instance = require_hub(manager, args.hub)
    manager.select(instance)
    click.echo(f"Selected hub {instance.name}")


def cmd_hub_list(args: HubListArgs) -> None:
    manager = open_manager(args.data_dir)
    selected_id = manager.selected.id if manager.selected else None

    if args.json:
        payload = [
            {**instance.to_dict(), "selected": instance.id == selected_id}
            for instance in manager.instances
        ]
        click.echo(json.dumps(payload, indent=2, sort_keys=True))
        return

    if not manager.instances:
        click.echo("No hubs configured.")
        return
    for instance in manager.instances:
        marker = "*" if instance.id == selected_id else " "
        click.echo(f"{marker} {instance.name}  {instance.url}  {instance.email}  ({instance.id})")
