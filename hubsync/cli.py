"""hubsync CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import (
    HubAddArgs,
    HubEditArgs,
    HubListArgs,
    HubRefArgs,
    SetIntervalArgs,
    StatusArgs,
    WatchArgs,
)
from .commands import (
    cmd_hub_add,
    cmd_hub_edit,
    cmd_hub_list,
    cmd_hub_remove,
    cmd_hub_select,
    cmd_set_interval,
    cmd_status,
    cmd_watch,
)
from .constants import STATUS_TIMEOUT_S
from .exceptions import CommandFailureError, HubSyncError, UserError

# Module logger
logger = logging.getLogger("hubsync")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


def data_dir_option(func):
    """Decorator adding --data-dir to a command."""
    return click.option(
        "--data-dir",
        type=click.Path(file_okay=False),
        help="Directory holding hub list and settings (default: $HUBSYNC_HOME or ~/.hubsync).",
    )(func)


def json_option(func):
    return click.option(
        "--json",
        "json_output",
        is_flag=True,
        help="Emit machine-readable JSON to stdout.",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("hubsync"), prog_name="hubsync")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging to stderr.",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """hubsync: keep an up-to-date view of Beszel/PocketBase monitoring hubs."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    setup_logging(debug=debug)


@cli.command("hub-add")
@click.argument("name")
@click.argument("url")
@click.argument("email")
@click.option(
    "--password",
    help="Account password (prompted, hidden, if neither this nor --token is given).",
)
@click.option("--token", help="Existing auth token to use instead of a password.")
@click.option(
    "--no-verify",
    is_flag=True,
    help="Save without a trial login.",
)
@data_dir_option
def hub_add(
    name: str,
    url: str,
    email: str,
    password: str | None,
    token: str | None,
    no_verify: bool,
    data_dir: str | None,
):
    """Add a hub after verifying the credentials against it."""
    if password and token:
        raise click.UsageError("Use either --password or --token, not both")
    credential = token or password
    if not credential:
        credential = click.prompt("Password", hide_input=True)
    args = HubAddArgs(
        name=name,
        url=url,
        email=email,
        credential=credential,
        data_dir=data_dir,
        no_verify=no_verify,
    )
    cmd_hub_add(args)


@cli.command("hub-edit")
@click.argument("hub")
@click.option("--name", help="New display name.")
@click.option("--url", help="New hub URL.")
@click.option("--email", help="New login email.")
@click.option(
    "--password",
    help="New password or auth token (keeps the stored one if omitted).",
)
@click.option(
    "--no-verify",
    is_flag=True,
    help="Save without a trial login.",
)
@data_dir_option
def hub_edit(
    hub: str,
    name: str | None,
    url: str | None,
    email: str | None,
    password: str | None,
    no_verify: bool,
    data_dir: str | None,
):
    """Edit a hub (by name or id)."""
    args = HubEditArgs(
        hub=hub,
        name=name,
        url=url,
        email=email,
        credential=password,
        data_dir=data_dir,
        no_verify=no_verify,
    )
    cmd_hub_edit(args)


@cli.command("hub-remove")
@click.argument("hub")
@data_dir_option
def hub_remove(hub: str, data_dir: str | None):
    """Remove a hub and its stored credential."""
    cmd_hub_remove(HubRefArgs(hub=hub, data_dir=data_dir))


@cli.command("hub-select")
@click.argument("hub")
@data_dir_option
def hub_select(hub: str, data_dir: str | None):
    """Make a hub the default for status and watch."""
    cmd_hub_select(HubRefArgs(hub=hub, data_dir=data_dir))


@cli.command("hub-list")
@data_dir_option
@json_option
def hub_list(data_dir: str | None, json_output: bool):
    """List configured hubs (* marks the selected one)."""
    cmd_hub_list(HubListArgs(data_dir=data_dir, json=json_output))


@cli.command("status")
@click.option("--hub", help="Hub name or id (default: selected hub).")
@data_dir_option
@json_option
@click.option(
    "--timeout",
    type=int,
    default=STATUS_TIMEOUT_S,
    show_default=True,
    help="Seconds to wait for the refresh to finish.",
)
def status(hub: str | None, data_dir: str | None, json_output: bool, timeout: int):
    """Fetch systems, details, containers and alerts once and print them."""
    args = StatusArgs(hub=hub, data_dir=data_dir, json=json_output, timeout=timeout)
    cmd_status(args)


@cli.command("watch")
@click.option("--hub", help="Hub name or id (default: selected hub).")
@data_dir_option
@json_option
@click.option(
    "--interval",
    type=int,
    help="Refresh interval in seconds, 10-300 (default: from settings; follows set-interval).",
)
def watch(hub: str | None, data_dir: str | None, json_output: bool, interval: int | None):
    """Refresh a hub periodically and print each new snapshot."""
    args = WatchArgs(hub=hub, data_dir=data_dir, interval=interval, json=json_output)
    cmd_watch(args)


@cli.command("set-interval")
@click.argument("seconds", type=int)
@data_dir_option
def set_interval(seconds: int, data_dir: str | None):
    """Set the refresh interval (clamped to 10-300 seconds)."""
    cmd_set_interval(SetIntervalArgs(seconds=seconds, data_dir=data_dir))


def main():
    """Main entry point for the CLI."""
    try:
        cli()
    except CommandFailureError as e:
        # Command already printed its error message, just exit
        sys.exit(e.rc)
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except HubSyncError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except KeyboardInterrupt:
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
