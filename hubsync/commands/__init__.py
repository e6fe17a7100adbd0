"""hubsync command implementations."""

from __future__ import annotations

from .hubs import cmd_hub_add, cmd_hub_edit, cmd_hub_list, cmd_hub_remove, cmd_hub_select
from .interval import cmd_set_interval
from .status import cmd_status
from .watch import cmd_watch

__all__ = [
    "cmd_hub_add",
    "cmd_hub_edit",
    "cmd_hub_list",
    "cmd_hub_remove",
    "cmd_hub_select",
    "cmd_set_interval",
    "cmd_status",
    "cmd_watch",
]
